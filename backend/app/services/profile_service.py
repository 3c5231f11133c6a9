"""
FamilyEvents Backend — Profile Service
======================================

What:  Read and update the caller's own user record.
       Email addresses are stored lower-cased and must stay unique.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import AuthenticationError, ConflictError
from app.models.user import User
from app.schemas.auth import ProfileResponse, ProfileUpdate
from app.services.access_control import Identity
from app.services.persistence import flush_or_conflict

logger = logging.getLogger(__name__)

EMAIL_TAKEN_MESSAGE = "Email is already in use"


class ProfileService:

    async def _load(self, db: AsyncSession, identity: Identity) -> User:
        user = await db.get(User, identity.user_id)
        if user is None:
            raise AuthenticationError()
        return user

    async def get_profile(self, db: AsyncSession, identity: Identity) -> ProfileResponse:
        return ProfileResponse.model_validate(await self._load(db, identity))

    async def update_profile(
        self, db: AsyncSession, identity: Identity, data: ProfileUpdate
    ) -> ProfileResponse:
        """
        Raises:
            ConflictError: the new email belongs to another account
        """
        user = await self._load(db, identity)
        changes = data.model_dump(exclude_unset=True)

        if "email" in changes:
            email = str(changes["email"]).lower()
            taken = (
                await db.execute(select(User.id).where(User.email == email, User.id != user.id))
            ).scalar_one_or_none()
            if taken is not None:
                raise ConflictError(message=EMAIL_TAKEN_MESSAGE, context={"field": "email"})
            changes["email"] = email

        for field, value in changes.items():
            setattr(user, field, value)

        await flush_or_conflict(db, EMAIL_TAKEN_MESSAGE, context={"field": "email"})
        await db.refresh(user)
        logger.info("Profile %s updated: %s", user.id, sorted(changes))
        return ProfileResponse.model_validate(user)


# ── Singleton Instance ────────────────────────────────────────────────────
profile_service = ProfileService()
