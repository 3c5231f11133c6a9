"""
FamilyEvents Backend — Privacy Route Handlers
=============================================

What:  /api/events/{id}/privacy. Only the event creator may write.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_identity
from app.schemas.common import ERROR_RESPONSES, SuccessResponse
from app.schemas.privacy import PrivacyListResponse, PrivacyResponse, PrivacySet
from app.services.access_control import Identity
from app.services.privacy_service import privacy_service

router = APIRouter(
    prefix="/api/events/{event_id}/privacy", tags=["Privacy"], responses=ERROR_RESPONSES
)


@router.get("", response_model=PrivacyListResponse, summary="List privacy overrides")
async def list_privacy(
    event_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> PrivacyListResponse:
    return PrivacyListResponse(privacy=await privacy_service.list_privacy(db, identity, event_id))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=PrivacyResponse,
    responses={200: {"description": "Existing override replaced", "model": PrivacyResponse}},
    summary="Create or replace a user's privacy override (event creator)",
)
async def set_privacy(
    event_id: UUID,
    body: PrivacySet,
    response: Response,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> PrivacyResponse:
    result, created = await privacy_service.set_privacy(db, identity, event_id, body)
    if not created:
        response.status_code = status.HTTP_200_OK
    return result


@router.delete("/{user_id}", response_model=SuccessResponse, summary="Remove a privacy override")
async def delete_privacy(
    event_id: UUID,
    user_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await privacy_service.delete_privacy(db, identity, event_id, user_id)
    return SuccessResponse(message="Privacy setting removed")
