"""
FamilyEvents Backend — Rate Limiting Middleware
===============================================

What:  Per-IP sliding-window rate limiter.
How:   Keeps the timestamps of each IP's requests inside the window
       (RATE_LIMIT_WINDOW seconds); once RATE_LIMIT_REQUESTS are inside it,
       further requests get 429 with Retry-After until the oldest expires.

State is in-process memory: correct for a single uvicorn worker only.
Several workers or instances each count separately.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.config import settings
from app.exceptions import RateLimitExceededError
from app.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

# Inactive IPs are swept every this many requests
SWEEP_EVERY = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[str, Deque[float]] = defaultdict(deque)
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        # Behind a proxy this is the proxy's address; run uvicorn with
        # --proxy-headers so request.client reflects X-Forwarded-For
        client_ip = request.client.host if request.client else "unknown"

        now = time.time()
        window_start = now - settings.rate_limit_window
        timestamps = self._requests[client_ip]
        while timestamps and timestamps[0] <= window_start:
            timestamps.popleft()

        if len(timestamps) >= settings.rate_limit_requests:
            retry_after = int(timestamps[0] + settings.rate_limit_window - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(timestamps),
                settings.rate_limit_window,
            )
            exc = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        timestamps.append(now)

        self._seen += 1
        if self._seen % SWEEP_EVERY == 0:
            self._sweep(window_start)

        return await call_next(request)

    def _sweep(self, window_start: float) -> None:
        """Forget IPs with no request inside the current window."""
        inactive = [ip for ip, ts in self._requests.items() if not ts or ts[-1] <= window_start]
        for ip in inactive:
            del self._requests[ip]
        if inactive:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive))
