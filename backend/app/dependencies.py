"""
FamilyEvents Backend — Request Dependencies
===========================================

What:  FastAPI dependencies shared by the route modules.

    get_current_identity  Authorization: Bearer <jwt> → Identity, else 401

HTTPBearer runs with auto_error=False: its built-in rejection is a 403,
while a missing session must be reported as 401 in the standard error body.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import AuthenticationError
from app.services.access_control import Identity
from app.services.auth_service import auth_service

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()
    return await auth_service.resolve_identity(db, credentials.credentials)
