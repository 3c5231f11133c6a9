"""
FamilyEvents Backend — Family Route Handlers
============================================

What:  /api/families and /api/families/{id}/members.
How:   Thin handlers: parse the request, pass the caller's Identity and the
       request session to FamilyService, wrap the result.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_identity
from app.schemas.common import ERROR_RESPONSES, SuccessResponse
from app.schemas.family import (
    FamilyCreate,
    FamilyListResponse,
    FamilyMemberAdd,
    FamilyMemberListResponse,
    FamilyMemberResponse,
    FamilyResponse,
    FamilyUpdate,
)
from app.services.access_control import Identity
from app.services.family_service import family_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/families", tags=["Families"], responses=ERROR_RESPONSES)


@router.get("", response_model=FamilyListResponse, summary="List the caller's families")
async def list_families(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> FamilyListResponse:
    return FamilyListResponse(families=await family_service.list_families(db, identity))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=FamilyResponse,
    summary="Create a family",
    description="Creates the family and makes the caller its admin in one transaction.",
)
async def create_family(
    body: FamilyCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> FamilyResponse:
    return await family_service.create_family(db, identity, body)


@router.get("/{family_id}", response_model=FamilyResponse, summary="Get a family")
async def get_family(
    family_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> FamilyResponse:
    return await family_service.get_family(db, identity, family_id)


@router.put("/{family_id}", response_model=FamilyResponse, summary="Update a family (admin)")
async def update_family(
    family_id: UUID,
    body: FamilyUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> FamilyResponse:
    return await family_service.update_family(db, identity, family_id, body)


@router.delete(
    "/{family_id}",
    response_model=SuccessResponse,
    summary="Delete a family (admin)",
    description="Also deletes its memberships, events and everything attached to them.",
)
async def delete_family(
    family_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await family_service.delete_family(db, identity, family_id)
    return SuccessResponse(message="Family deleted")


# ── Members ───────────────────────────────────────────────────────────────


@router.get(
    "/{family_id}/members",
    response_model=FamilyMemberListResponse,
    summary="List family members",
)
async def list_members(
    family_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> FamilyMemberListResponse:
    return FamilyMemberListResponse(
        members=await family_service.list_members(db, identity, family_id)
    )


@router.post(
    "/{family_id}/members",
    status_code=status.HTTP_201_CREATED,
    response_model=FamilyMemberResponse,
    summary="Add an existing user to the family (admin)",
)
async def add_member(
    family_id: UUID,
    body: FamilyMemberAdd,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> FamilyMemberResponse:
    return await family_service.add_member(db, identity, family_id, body)


@router.delete(
    "/{family_id}/members/{user_id}",
    response_model=SuccessResponse,
    summary="Remove a member (admin, or yourself)",
)
async def remove_member(
    family_id: UUID,
    user_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await family_service.remove_member(db, identity, family_id, user_id)
    return SuccessResponse(message="Member removed")
