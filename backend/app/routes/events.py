"""
FamilyEvents Backend — Event Route Handlers
===========================================

What:  /api/events (list, create) and /api/events/{id} (get, update, delete).
       Nested event resources live in media.py, comments.py,
       contributors.py and privacy.py.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_identity
from app.schemas.common import ERROR_RESPONSES, SuccessResponse
from app.schemas.event import EventCreate, EventListResponse, EventResponse, EventUpdate
from app.services.access_control import Identity
from app.services.event_service import event_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events", tags=["Events"], responses=ERROR_RESPONSES)


@router.get(
    "",
    response_model=EventListResponse,
    summary="List events in the caller's families",
    description=(
        "Newest first. Events hidden from the caller by a privacy override are "
        "left out. Sets X-Total-Count to the number of events returned."
    ),
)
async def list_events(
    response: Response,
    limit: Optional[int] = Query(default=None, ge=1, le=100, description="Max events (default 10)"),
    family_id: Optional[UUID] = Query(default=None, description="Only events of this family"),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> EventListResponse:
    events = await event_service.list_events(db, identity, limit=limit, family_id=family_id)
    response.headers["X-Total-Count"] = str(len(events))
    return EventListResponse(events=events)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=EventResponse,
    summary="Create an event in one of the caller's families",
)
async def create_event(
    body: EventCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> EventResponse:
    return await event_service.create_event(db, identity, body)


@router.get("/{event_id}", response_model=EventResponse, summary="Get an event")
async def get_event(
    event_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> EventResponse:
    return await event_service.get_event(db, identity, event_id)


@router.put(
    "/{event_id}",
    response_model=EventResponse,
    summary="Update an event",
    description="Allowed for the creator, family admins, and users granted can_edit by a privacy override.",
)
async def update_event(
    event_id: UUID,
    body: EventUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> EventResponse:
    return await event_service.update_event(db, identity, event_id, body)


@router.delete(
    "/{event_id}",
    response_model=SuccessResponse,
    summary="Delete an event (creator or family admin)",
)
async def delete_event(
    event_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await event_service.delete_event(db, identity, event_id)
    return SuccessResponse(message="Event deleted")
