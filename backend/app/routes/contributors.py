"""
FamilyEvents Backend — Contributor Route Handlers
=================================================

What:  /api/events/{id}/contributors. The contributor is addressed by user id.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_identity
from app.schemas.common import ERROR_RESPONSES, ErrorResponse, SuccessResponse
from app.schemas.contributor import (
    ContributorCreate,
    ContributorListResponse,
    ContributorResponse,
    ContributorUpdate,
)
from app.services.access_control import Identity
from app.services.contributor_service import contributor_service

router = APIRouter(
    prefix="/api/events/{event_id}/contributors",
    tags=["Contributors"],
    responses=ERROR_RESPONSES,
)


@router.get("", response_model=ContributorListResponse, summary="List event contributors")
async def list_contributors(
    event_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ContributorListResponse:
    return ContributorListResponse(
        contributors=await contributor_service.list_contributors(db, identity, event_id)
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ContributorResponse,
    responses={409: {"description": "Already a contributor", "model": ErrorResponse}},
    summary="Add a contributor (creator or contributor with can_invite)",
)
async def add_contributor(
    event_id: UUID,
    body: ContributorCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ContributorResponse:
    return await contributor_service.add_contributor(db, identity, event_id, body)


@router.put("/{user_id}", response_model=ContributorResponse, summary="Change a contributor's grants")
async def update_contributor(
    event_id: UUID,
    user_id: UUID,
    body: ContributorUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ContributorResponse:
    return await contributor_service.update_contributor(db, identity, event_id, user_id, body)


@router.delete("/{user_id}", response_model=SuccessResponse, summary="Remove a contributor")
async def remove_contributor(
    event_id: UUID,
    user_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await contributor_service.remove_contributor(db, identity, event_id, user_id)
    return SuccessResponse(message="Contributor removed")
