"""
FamilyEvents Backend — Notification Model
=========================================

What:  In-app notifications owned by one user (`notifications` table).
       Delivery (email, push) is outside this service; rows are only
       stored, listed, marked read and deleted.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.common import utc_now

NOTIFICATION_TYPES = ("comment", "media_upload", "event_update", "invitation", "system")


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(
        String(20), nullable=False, comment=" | ".join(NOTIFICATION_TYPES)
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    message: Mapped[str] = mapped_column(String(500), nullable=False)

    # Loose pointer at the entity the notification is about (no FK: the
    # target may be an event, comment, media item, ...)
    reference_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    reference_type: Mapped[str | None] = mapped_column(String(50), nullable=True)

    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        Index("idx_notifications_user_created", "user_id", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, user_id={self.user_id}, type='{self.type}')>"
