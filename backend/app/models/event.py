"""
FamilyEvents Backend — Event, EventContributor and EventPrivacy Models
======================================================================

What:  ORM models for `events` and the two per-event, per-user registries
       consulted by the access-control resolver.

    events            : belongs to one family, has one creator
    event_contributors: extra users granted edit/delete/invite flags
    event_privacy     : per-user overrides of view/edit/comment/upload

Everything hanging off an event uses ON DELETE CASCADE, so deleting an
event (or its family) removes its media, comments, contributors and
privacy rows in the database itself.
"""

import uuid
from datetime import datetime
from typing import List

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.common import JSONType, utc_now

EVENT_TYPES = ("wedding", "birthday", "holiday", "graduation", "anniversary", "vacation", "other")
CONTRIBUTOR_ROLES = ("owner", "editor", "viewer")


class Event(Base):
    """A documented occurrence owned by a family."""

    __tablename__ = "events"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)

    family_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("families.id", ondelete="CASCADE"), nullable=False
    )
    created_by_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )

    event_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="other", comment=" | ".join(EVENT_TYPES)
    )
    tags: Mapped[List[str]] = mapped_column(JSONType, nullable=False, default=list)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        Index("idx_events_family_id", "family_id"),
        # Event lists are "newest first"
        Index("idx_events_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title='{self.title}', family_id={self.family_id})>"


class EventContributor(Base):
    """
    Extra capabilities on one event for one non-creator user.

    The three flags are independent. Any contributor row (whatever its
    flags) is enough to comment and upload media.
    """

    __tablename__ = "event_contributors"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="editor", comment=" | ".join(CONTRIBUTOR_ROLES)
    )
    added_by_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    can_edit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    can_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    can_invite: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_contributors_event_user"),
    )

    def __repr__(self) -> str:
        return (
            f"<EventContributor(event_id={self.event_id}, user_id={self.user_id}, "
            f"role='{self.role}')>"
        )


class EventPrivacy(Base):
    """Per-user capability override on one event. Only the creator writes these."""

    __tablename__ = "event_privacy"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    can_view: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    can_edit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    can_comment: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    can_upload_media: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_privacy_event_user"),
    )

    def __repr__(self) -> str:
        return f"<EventPrivacy(event_id={self.event_id}, user_id={self.user_id})>"
