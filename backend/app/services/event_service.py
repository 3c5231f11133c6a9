"""
FamilyEvents Backend — Event Service
====================================

What:  Event CRUD within families.
Who:   Called by app.routes.events.

Visibility:
    An event is visible to members of its family. A privacy override with
    can_view=false hides it from that one user (never from its creator),
    both in the list and on the detail endpoint.

Deleting an event removes its media, comments, contributors and privacy
rows through ON DELETE CASCADE.
"""

import logging
import uuid
from typing import Dict, List, Optional

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.comment import Comment
from app.models.event import Event, EventPrivacy
from app.models.family import Family, FamilyMember
from app.models.media import Media
from app.models.user import User
from app.schemas.common import UserSummary
from app.schemas.event import EventCreate, EventResponse, EventUpdate
from app.services.access_control import EventAction, FamilyAction, Identity, access_control
from app.services.persistence import database_errors

logger = logging.getLogger(__name__)


class EventService:

    async def _counts(
        self, db: AsyncSession, model, event_ids: List[uuid.UUID]
    ) -> Dict[uuid.UUID, int]:
        if not event_ids:
            return {}
        result = await db.execute(
            select(model.event_id, func.count(model.id))
            .where(model.event_id.in_(event_ids))
            .group_by(model.event_id)
        )
        return {event_id: count for event_id, count in result.all()}

    async def _build_responses(
        self, db: AsyncSession, rows: List[tuple]
    ) -> List[EventResponse]:
        """rows: (Event, family name, creator User) tuples."""
        event_ids = [event.id for event, _, _ in rows]
        media_counts = await self._counts(db, Media, event_ids)
        comment_counts = await self._counts(db, Comment, event_ids)
        return [
            EventResponse(
                id=event.id,
                title=event.title,
                description=event.description,
                date=event.date,
                location=event.location,
                family_id=event.family_id,
                family_name=family_name,
                created_by_id=event.created_by_id,
                created_by=UserSummary.model_validate(creator),
                event_type=event.event_type,
                tags=list(event.tags or []),
                is_public=event.is_public,
                media_count=media_counts.get(event.id, 0),
                comment_count=comment_counts.get(event.id, 0),
                created_at=event.created_at,
                updated_at=event.updated_at,
            )
            for event, family_name, creator in rows
        ]

    async def build_event_response(self, db: AsyncSession, event: Event) -> EventResponse:
        family_name = (
            await db.execute(select(Family.name).where(Family.id == event.family_id))
        ).scalar_one()
        creator = await db.get(User, event.created_by_id)
        responses = await self._build_responses(db, [(event, family_name, creator)])
        return responses[0]

    async def list_events(
        self,
        db: AsyncSession,
        identity: Identity,
        limit: Optional[int] = None,
        family_id: Optional[uuid.UUID] = None,
    ) -> List[EventResponse]:
        """
        Events of every family the caller belongs to, newest first.

        Query plan:
            events ⋈ family_members (caller) ⋈ families ⋈ users (creator)
            ⟕ event_privacy (caller), dropping rows whose override hides
            the event, ORDER BY events.created_at DESC LIMIT :limit
        """
        limit = limit or settings.events_default_limit
        caller = identity.user_id

        query = (
            select(Event, Family.name, User)
            .join(
                FamilyMember,
                and_(FamilyMember.family_id == Event.family_id, FamilyMember.user_id == caller),
            )
            .join(Family, Family.id == Event.family_id)
            .join(User, User.id == Event.created_by_id)
            .outerjoin(
                EventPrivacy,
                and_(EventPrivacy.event_id == Event.id, EventPrivacy.user_id == caller),
            )
            .where(
                or_(
                    EventPrivacy.id.is_(None),
                    EventPrivacy.can_view.is_(True),
                    Event.created_by_id == caller,
                )
            )
        )
        if family_id is not None:
            query = query.where(Event.family_id == family_id)
        query = query.order_by(Event.created_at.desc()).limit(limit)

        with database_errors("list_events"):
            rows = (await db.execute(query)).all()
            return await self._build_responses(db, [tuple(row) for row in rows])

    async def create_event(
        self, db: AsyncSession, identity: Identity, data: EventCreate
    ) -> EventResponse:
        """
        Raises:
            NotFoundError: family_id does not exist
            PermissionDeniedError: caller is not a member of that family
        """
        access = await access_control.family_access(db, identity, data.family_id)
        access.require(FamilyAction.CREATE_EVENT)

        event = Event(
            title=data.title,
            description=data.description,
            date=data.date,
            location=data.location,
            family_id=data.family_id,
            created_by_id=identity.user_id,
            event_type=data.event_type,
            tags=list(data.tags),
            is_public=data.is_public,
        )
        db.add(event)
        await db.flush()
        logger.info("Event %s created in family %s by %s", event.id, event.family_id, identity.user_id)
        return await self.build_event_response(db, event)

    async def get_event(
        self, db: AsyncSession, identity: Identity, event_id: uuid.UUID
    ) -> EventResponse:
        access = await access_control.event_access(db, identity, event_id)
        access.require(EventAction.VIEW)
        return await self.build_event_response(db, access.event)

    async def update_event(
        self, db: AsyncSession, identity: Identity, event_id: uuid.UUID, data: EventUpdate
    ) -> EventResponse:
        """Creator, family admin, or a user whose privacy override grants can_edit."""
        access = await access_control.event_access(db, identity, event_id)
        access.require(EventAction.UPDATE)
        event = access.event

        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(event, field, list(value) if field == "tags" else value)

        await db.flush()
        await db.refresh(event)
        logger.info("Event %s updated by %s: %s", event.id, identity.user_id, sorted(changes))
        return await self.build_event_response(db, event)

    async def delete_event(
        self, db: AsyncSession, identity: Identity, event_id: uuid.UUID
    ) -> None:
        access = await access_control.event_access(db, identity, event_id)
        access.require(EventAction.DELETE)

        with database_errors("delete_event", event_id=str(event_id)):
            await db.execute(delete(Event).where(Event.id == event_id))
        logger.info("Event %s deleted by %s", event_id, identity.user_id)


# ── Singleton Instance ────────────────────────────────────────────────────
event_service = EventService()
