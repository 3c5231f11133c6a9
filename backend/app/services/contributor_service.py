"""
FamilyEvents Backend — Contributor Service
==========================================

What:  Manages the per-event contributor registry (extra capabilities for
       users other than the event creator).

Rules:
    - The event creator is never a contributor: adding them is rejected, and
      removing them always fails with "Cannot remove event creator", for
      every caller, before any permission check.
    - (event, user) is unique; a second add is a ConflictError.
    - Add / update / remove need MANAGE_CONTRIBUTORS (creator, or a
      contributor with can_invite).
"""

import logging
import uuid
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.exceptions import NotFoundError, ValidationError
from app.models.event import EventContributor
from app.models.user import User
from app.schemas.common import UserSummary
from app.schemas.contributor import ContributorCreate, ContributorResponse, ContributorUpdate
from app.services.access_control import EventAction, Identity, access_control
from app.services.persistence import database_errors, flush_or_conflict

logger = logging.getLogger(__name__)

CREATOR_REMOVAL_MESSAGE = "Cannot remove event creator"


class ContributorService:

    def _to_response(
        self, contributor: EventContributor, user: User, added_by: User
    ) -> ContributorResponse:
        return ContributorResponse(
            id=contributor.id,
            event_id=contributor.event_id,
            user_id=contributor.user_id,
            user=UserSummary.model_validate(user),
            role=contributor.role,
            added_by_id=contributor.added_by_id,
            added_by=UserSummary.model_validate(added_by),
            can_edit=contributor.can_edit,
            can_delete=contributor.can_delete,
            can_invite=contributor.can_invite,
            created_at=contributor.created_at,
        )

    async def _respond(self, db: AsyncSession, contributor: EventContributor) -> ContributorResponse:
        user = await db.get(User, contributor.user_id)
        added_by = await db.get(User, contributor.added_by_id)
        return self._to_response(contributor, user, added_by)

    async def _get_contributor(
        self, db: AsyncSession, event_id: uuid.UUID, user_id: uuid.UUID
    ) -> EventContributor:
        contributor = (
            await db.execute(
                select(EventContributor).where(
                    EventContributor.event_id == event_id,
                    EventContributor.user_id == user_id,
                )
            )
        ).scalar_one_or_none()
        if contributor is None:
            raise NotFoundError(resource="contributor", message="Contributor not found")
        return contributor

    async def list_contributors(
        self, db: AsyncSession, identity: Identity, event_id: uuid.UUID
    ) -> List[ContributorResponse]:
        access = await access_control.event_access(db, identity, event_id)
        access.require(EventAction.VIEW)

        added_by = aliased(User)
        with database_errors("list_contributors", event_id=str(event_id)):
            result = await db.execute(
                select(EventContributor, User, added_by)
                .join(User, User.id == EventContributor.user_id)
                .join(added_by, added_by.id == EventContributor.added_by_id)
                .where(EventContributor.event_id == event_id)
                .order_by(EventContributor.created_at.asc())
            )
            rows = result.all()
        return [self._to_response(c, user, adder) for c, user, adder in rows]

    async def add_contributor(
        self, db: AsyncSession, identity: Identity, event_id: uuid.UUID, data: ContributorCreate
    ) -> ContributorResponse:
        """
        Raises:
            NotFoundError: event or user does not exist
            PermissionDeniedError: caller may not manage contributors
            ValidationError: the user is the event creator
            ConflictError: the user already is a contributor
        """
        access = await access_control.event_access(db, identity, event_id)
        access.require(EventAction.MANAGE_CONTRIBUTORS)

        if await db.get(User, data.user_id) is None:
            raise NotFoundError(resource="user", message="User not found")
        if data.user_id == access.event.created_by_id:
            raise ValidationError(
                message="Event creator already has full access", field="user_id"
            )

        contributor = EventContributor(
            event_id=event_id,
            added_by_id=identity.user_id,
            **data.model_dump(),
        )
        db.add(contributor)
        await flush_or_conflict(
            db, "User is already a contributor", context={"user_id": str(data.user_id)}
        )
        logger.info(
            "User %s added as %s contributor on event %s by %s",
            data.user_id, data.role, event_id, identity.user_id,
        )
        return await self._respond(db, contributor)

    async def update_contributor(
        self,
        db: AsyncSession,
        identity: Identity,
        event_id: uuid.UUID,
        user_id: uuid.UUID,
        data: ContributorUpdate,
    ) -> ContributorResponse:
        access = await access_control.event_access(db, identity, event_id)
        contributor = await self._get_contributor(db, event_id, user_id)
        access.require(EventAction.MANAGE_CONTRIBUTORS)

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(contributor, field, value)
        await db.flush()
        logger.info("Contributor %s on event %s updated by %s", user_id, event_id, identity.user_id)
        return await self._respond(db, contributor)

    async def remove_contributor(
        self, db: AsyncSession, identity: Identity, event_id: uuid.UUID, user_id: uuid.UUID
    ) -> None:
        """
        Order of checks: event exists → caller is a member → target is not
        the creator → target is a contributor → caller may manage.
        """
        access = await access_control.event_access(db, identity, event_id)

        if user_id == access.event.created_by_id:
            raise ValidationError(message=CREATOR_REMOVAL_MESSAGE, field="user_id")

        contributor = await self._get_contributor(db, event_id, user_id)
        access.require(EventAction.MANAGE_CONTRIBUTORS)

        await db.delete(contributor)
        await db.flush()
        logger.info("Contributor %s removed from event %s by %s", user_id, event_id, identity.user_id)


# ── Singleton Instance ────────────────────────────────────────────────────
contributor_service = ContributorService()
