"""
FamilyEvents Backend — Notification Service
===========================================

What:  A user's own in-app notifications. Every operation is scoped to the
       caller; another user's notification is 404 when missing and 403 when
       it exists but belongs to someone else.
"""

import logging
import uuid
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import NotFoundError, PermissionDeniedError
from app.models.notification import Notification
from app.schemas.notification import NotificationCreate, NotificationResponse
from app.services.access_control import Identity
from app.services.persistence import database_errors

logger = logging.getLogger(__name__)


class NotificationService:

    async def _get_owned(
        self, db: AsyncSession, identity: Identity, notification_id: uuid.UUID
    ) -> Notification:
        notification = await db.get(Notification, notification_id)
        if notification is None:
            raise NotFoundError(resource="notification", message="Notification not found")
        if notification.user_id != identity.user_id:
            logger.warning(
                "User %s tried to access notification %s", identity.user_id, notification_id
            )
            raise PermissionDeniedError()
        return notification

    async def list_notifications(
        self,
        db: AsyncSession,
        identity: Identity,
        limit: Optional[int] = None,
        unread_only: bool = False,
    ) -> Tuple[List[NotificationResponse], int]:
        """
        Returns:
            (newest-first notifications, total unread count)
        """
        limit = limit or settings.notifications_default_limit
        query = select(Notification).where(Notification.user_id == identity.user_id)
        if unread_only:
            query = query.where(Notification.is_read.is_(False))
        query = query.order_by(Notification.created_at.desc()).limit(limit)

        with database_errors("list_notifications"):
            notifications = (await db.execute(query)).scalars().all()
            unread = (
                await db.execute(
                    select(func.count(Notification.id)).where(
                        Notification.user_id == identity.user_id,
                        Notification.is_read.is_(False),
                    )
                )
            ).scalar_one()
        return [NotificationResponse.model_validate(n) for n in notifications], unread

    async def create_notification(
        self, db: AsyncSession, identity: Identity, data: NotificationCreate
    ) -> NotificationResponse:
        notification = Notification(user_id=identity.user_id, **data.model_dump())
        db.add(notification)
        await db.flush()
        logger.info("Notification %s (%s) created for %s", notification.id, data.type, identity.user_id)
        return NotificationResponse.model_validate(notification)

    async def set_read(
        self, db: AsyncSession, identity: Identity, notification_id: uuid.UUID, is_read: bool
    ) -> NotificationResponse:
        notification = await self._get_owned(db, identity, notification_id)
        notification.is_read = is_read
        await db.flush()
        await db.refresh(notification)
        return NotificationResponse.model_validate(notification)

    async def delete_notification(
        self, db: AsyncSession, identity: Identity, notification_id: uuid.UUID
    ) -> None:
        await self._get_owned(db, identity, notification_id)
        await db.execute(delete(Notification).where(Notification.id == notification_id))
        logger.info("Notification %s deleted by %s", notification_id, identity.user_id)


# ── Singleton Instance ────────────────────────────────────────────────────
notification_service = NotificationService()
