"""
FamilyEvents Backend — Request ID Middleware
============================================

What:  Assigns each request a correlation id and returns it in X-Request-ID.
How:   Reuses a client-supplied X-Request-ID header, otherwise generates a
       short UUID. The id is stored in a ContextVar (read by the exception
       handlers for the `request_id` field of error bodies and by the access
       log) and on request.state.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one thread each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"
MAX_CLIENT_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Client ids are echoed into logs, so overlong values are replaced
        rid = request.headers.get(REQUEST_ID_HEADER, "")
        if not rid or len(rid) > MAX_CLIENT_ID_LENGTH:
            rid = str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
