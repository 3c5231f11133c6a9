"""
FamilyEvents Backend — Family and FamilyMember Models
=====================================================

What:  ORM models for `families` and the `family_members` join table.
Why:   Family membership is the first gate of every access decision: a
       user with no FamilyMember row sees nothing of the family's events.

Table Design Rationale:
    - settings: JSON document {is_public, allow_join_requests, max_members}
      (JSONB on PostgreSQL). Kept as one column because it is read and
      written as a unit.
    - family_members.role: 'admin' | 'member'. Admins may update/delete the
      family and manage members.
    - UNIQUE(family_id, user_id): a user holds at most one role per family.
    - ON DELETE CASCADE on both foreign keys: deleting a family (or a user)
      removes the membership rows with it.

The family creator is NOT implicitly an admin. FamilyService inserts the
admin membership row in the same transaction as the family row.
"""

import uuid
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.common import JSONType, utc_now

ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"


def default_family_settings() -> Dict[str, Any]:
    return {"is_public": False, "allow_join_requests": True, "max_members": None}


class Family(Base):
    """A named group of users sharing events."""

    __tablename__ = "families"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_by_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )

    settings: Mapped[Dict[str, Any]] = mapped_column(
        JSONType,
        nullable=False,
        default=default_family_settings,
        comment="is_public, allow_join_requests, max_members",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    def __repr__(self) -> str:
        return f"<Family(id={self.id}, name='{self.name}')>"


class FamilyMember(Base):
    """Membership of one user in one family, with a role."""

    __tablename__ = "family_members"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    family_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("families.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ROLE_MEMBER, comment="admin | member"
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    __table_args__ = (
        UniqueConstraint("family_id", "user_id", name="uq_family_members_family_user"),
        # Membership lookups by user: "which families am I in?"
        Index("idx_family_members_user_id", "user_id"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self) -> str:
        return (
            f"<FamilyMember(family_id={self.family_id}, user_id={self.user_id}, "
            f"role='{self.role}')>"
        )
