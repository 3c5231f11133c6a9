"""
FamilyEvents Backend — Auth Service (Session Tokens)
====================================================

What:  Issues and verifies the bearer tokens that identify API callers, and
       implements the demo sign-in.
How:   HS256 JWTs signed with settings.jwt_secret (PyJWT). Claims:
           sub    user id (UUID string)
           email  user email at issue time
           iat    issued-at, exp expiry (jwt_ttl_minutes)
Who:   `create_access_token` is used by the demo sign-in route and the test
       suite; `resolve_identity` by the bearer-token dependency.

The identity provider itself (OAuth, magic-link email) lives outside this
service. Anything able to mint a token with the shared secret can act as a
user, so JWT_SECRET must be overridden in every deployment.
"""

import logging
import time
import uuid
from typing import Any, Dict, Tuple

import jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import AuthenticationError, NotFoundError
from app.models.user import User
from app.services.access_control import Identity

logger = logging.getLogger(__name__)


class AuthService:
    """Token signing/verification and the demo account."""

    def create_access_token(self, user_id: uuid.UUID, email: str) -> str:
        now = int(time.time())
        payload = {
            "sub": str(user_id),
            "email": email,
            "iat": now,
            "exp": now + settings.jwt_ttl_minutes * 60,
        }
        return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)

    def decode_token(self, token: str) -> Dict[str, Any]:
        """
        Verify signature and expiry.

        Raises:
            AuthenticationError: expired, tampered or malformed token
        """
        try:
            return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError(message="Session expired")
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected bearer token: %s", e)
            raise AuthenticationError()

    async def resolve_identity(self, db: AsyncSession, token: str) -> Identity:
        """
        Turn a bearer token into an Identity.

        The user row must still exist: a token for a deleted account is
        treated like no token at all.
        """
        claims = self.decode_token(token)
        try:
            user_id = uuid.UUID(str(claims.get("sub")))
        except ValueError:
            raise AuthenticationError()

        user = await db.get(User, user_id)
        if user is None:
            logger.warning("Token for unknown user %s", user_id)
            raise AuthenticationError()
        return Identity(user_id=user.id, email=user.email)

    async def demo_login(self, db: AsyncSession) -> Tuple[User, str]:
        """
        Get-or-create the demo account and issue a token for it.

        Raises:
            NotFoundError: demo sign-in is disabled (the endpoint does not exist)
        """
        if not settings.demo_login_enabled:
            raise NotFoundError(resource="endpoint", message="Not found")

        email = settings.demo_user_email.lower()
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            user = User(email=email, name=settings.demo_user_name)
            db.add(user)
            await db.flush()
            logger.info("Demo user created: %s", user.id)

        return user, self.create_access_token(user.id, user.email)


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
