"""
FamilyEvents Backend — Event Privacy Service
============================================

What:  Per-user privacy overrides on an event (can_view, can_edit,
       can_comment, can_upload_media).
Who:   Only the event creator writes overrides (MANAGE_PRIVACY); any member
       who can view the event can read them.

POST is an upsert keyed on (event, user): 201 when the override is new,
200 when an existing one was replaced.
"""

import logging
import uuid
from typing import List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError
from app.models.event import EventPrivacy
from app.models.user import User
from app.schemas.common import UserSummary
from app.schemas.privacy import PrivacyResponse, PrivacySet
from app.services.access_control import EventAction, Identity, access_control
from app.services.persistence import database_errors, flush_or_conflict

logger = logging.getLogger(__name__)

PRIVACY_FLAGS = ("can_view", "can_edit", "can_comment", "can_upload_media")


class PrivacyService:

    def _to_response(self, row: EventPrivacy, user: User) -> PrivacyResponse:
        return PrivacyResponse(
            id=row.id,
            event_id=row.event_id,
            user_id=row.user_id,
            user=UserSummary.model_validate(user),
            can_view=row.can_view,
            can_edit=row.can_edit,
            can_comment=row.can_comment,
            can_upload_media=row.can_upload_media,
            created_at=row.created_at,
        )

    async def _find(
        self, db: AsyncSession, event_id: uuid.UUID, user_id: uuid.UUID
    ) -> EventPrivacy | None:
        result = await db.execute(
            select(EventPrivacy).where(
                EventPrivacy.event_id == event_id, EventPrivacy.user_id == user_id
            )
        )
        return result.scalar_one_or_none()

    async def list_privacy(
        self, db: AsyncSession, identity: Identity, event_id: uuid.UUID
    ) -> List[PrivacyResponse]:
        access = await access_control.event_access(db, identity, event_id)
        access.require(EventAction.VIEW)

        with database_errors("list_privacy", event_id=str(event_id)):
            result = await db.execute(
                select(EventPrivacy, User)
                .join(User, User.id == EventPrivacy.user_id)
                .where(EventPrivacy.event_id == event_id)
                .order_by(EventPrivacy.created_at.asc())
            )
            rows = result.all()
        return [self._to_response(row, user) for row, user in rows]

    async def set_privacy(
        self, db: AsyncSession, identity: Identity, event_id: uuid.UUID, data: PrivacySet
    ) -> Tuple[PrivacyResponse, bool]:
        """
        Create or replace the override for data.user_id.

        Returns:
            (response, created)
        """
        access = await access_control.event_access(db, identity, event_id)
        access.require(EventAction.MANAGE_PRIVACY)

        user = await db.get(User, data.user_id)
        if user is None:
            raise NotFoundError(resource="user", message="User not found")

        flags = data.model_dump(include=set(PRIVACY_FLAGS))
        row = await self._find(db, event_id, data.user_id)
        created = row is None
        if created:
            row = EventPrivacy(event_id=event_id, user_id=data.user_id, **flags)
            db.add(row)
        else:
            for field, value in flags.items():
                setattr(row, field, value)

        await flush_or_conflict(db, "Privacy override already exists for this user")
        logger.info(
            "Privacy override for user %s on event %s %s by %s: %s",
            data.user_id, event_id, "created" if created else "updated", identity.user_id, flags,
        )
        return self._to_response(row, user), created

    async def delete_privacy(
        self, db: AsyncSession, identity: Identity, event_id: uuid.UUID, user_id: uuid.UUID
    ) -> None:
        access = await access_control.event_access(db, identity, event_id)
        row = await self._find(db, event_id, user_id)
        if row is None:
            raise NotFoundError(resource="privacy", message="Privacy setting not found")
        access.require(EventAction.MANAGE_PRIVACY)

        await db.delete(row)
        await db.flush()
        logger.info("Privacy override for user %s on event %s removed", user_id, event_id)


# ── Singleton Instance ────────────────────────────────────────────────────
privacy_service = PrivacyService()
