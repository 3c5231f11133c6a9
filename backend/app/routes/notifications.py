"""
FamilyEvents Backend — Notification Route Handlers
==================================================

What:  /api/notifications, always scoped to the caller.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_identity
from app.schemas.common import ERROR_RESPONSES, SuccessResponse
from app.schemas.notification import (
    NotificationCreate,
    NotificationListResponse,
    NotificationResponse,
    NotificationUpdate,
)
from app.services.access_control import Identity
from app.services.notification_service import notification_service

router = APIRouter(prefix="/api/notifications", tags=["Notifications"], responses=ERROR_RESPONSES)


@router.get("", response_model=NotificationListResponse, summary="List your notifications")
async def list_notifications(
    limit: int | None = Query(default=None, ge=1, le=100, description="Max items (default 20)"),
    unread_only: bool = Query(default=False),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> NotificationListResponse:
    notifications, unread = await notification_service.list_notifications(
        db, identity, limit=limit, unread_only=unread_only
    )
    return NotificationListResponse(notifications=notifications, unread_count=unread)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=NotificationResponse,
    summary="Create a notification for yourself",
)
async def create_notification(
    body: NotificationCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> NotificationResponse:
    return await notification_service.create_notification(db, identity, body)


@router.put("/{notification_id}", response_model=NotificationResponse, summary="Mark read / unread")
async def update_notification(
    notification_id: UUID,
    body: NotificationUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> NotificationResponse:
    return await notification_service.set_read(db, identity, notification_id, body.is_read)


@router.delete("/{notification_id}", response_model=SuccessResponse, summary="Delete a notification")
async def delete_notification(
    notification_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await notification_service.delete_notification(db, identity, notification_id)
    return SuccessResponse(message="Notification deleted")
