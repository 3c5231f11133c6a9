"""
FamilyEvents Backend — User Model
=================================

What:  ORM model for the `users` table.
Who:   Created on first sign-in (demo login) or by the identity provider
       integration; read by the profile service and embedded as a summary
       in most responses.

Email is unique and stored lower-cased so lookups by email (adding a
family member) are case-insensitive.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.common import utc_now


class User(Base):
    """An authenticated person. The id never changes once issued."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    email: Mapped[str] = mapped_column(
        String(320),
        unique=True,
        nullable=False,
        comment="Lower-cased, unique login email",
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Optional avatar URL
    image: Mapped[str | None] = mapped_column(Text, nullable=True)

    email_verified: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
