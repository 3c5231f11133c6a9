"""
FamilyEvents Backend — Media Model
==================================

What:  Attachment metadata for one event (`media` table).
How:   Rows are created either from client-supplied metadata (file hosted
       elsewhere, `url` points at it) or by the multipart upload endpoint,
       which stores the bytes under STORAGE_ROOT and sets `url` to
       /api/files/<relative path>. Only uploads set storage_path; it is the
       one column file serving and file removal trust.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.common import utc_now


class Media(Base):
    __tablename__ = "media"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )
    uploaded_by_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )

    # Stored name (UUID-based for uploads) vs the name the user picked
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False, comment="Bytes")

    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    storage_path: Mapped[str | None] = mapped_column(
        String(500), nullable=True, comment="Relative path under STORAGE_ROOT, uploads only"
    )
    alt_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    __table_args__ = (
        Index("idx_media_event_id", "event_id"),
        Index("idx_media_storage_path", "storage_path"),
    )

    def __repr__(self) -> str:
        return f"<Media(id={self.id}, event_id={self.event_id}, filename='{self.filename}')>"
