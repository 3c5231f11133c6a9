"""
FamilyEvents Backend — Comment Route Handlers
=============================================

What:  /api/events/{id}/comments, threaded.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_identity
from app.schemas.comment import CommentCreate, CommentListResponse, CommentResponse, CommentUpdate
from app.schemas.common import ERROR_RESPONSES, SuccessResponse
from app.services.access_control import Identity
from app.services.comment_service import comment_service

router = APIRouter(
    prefix="/api/events/{event_id}/comments", tags=["Comments"], responses=ERROR_RESPONSES
)


@router.get("", response_model=CommentListResponse, summary="List comments as threads")
async def list_comments(
    event_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> CommentListResponse:
    return CommentListResponse(
        comments=await comment_service.list_comments(db, identity, event_id)
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=CommentResponse,
    summary="Comment on an event, or reply to a comment",
)
async def create_comment(
    event_id: UUID,
    body: CommentCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await comment_service.create_comment(db, identity, event_id, body)


@router.put("/{comment_id}", response_model=CommentResponse, summary="Edit your own comment")
async def update_comment(
    event_id: UUID,
    comment_id: UUID,
    body: CommentUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await comment_service.update_comment(db, identity, event_id, comment_id, body)


@router.delete(
    "/{comment_id}",
    response_model=SuccessResponse,
    summary="Delete a comment and its replies (author or event creator)",
)
async def delete_comment(
    event_id: UUID,
    comment_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await comment_service.delete_comment(db, identity, event_id, comment_id)
    return SuccessResponse(message="Comment deleted")
