"""
FamilyEvents Backend — Event Schemas
====================================

What:  Request/response models for /api/events.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from app.schemas.common import UserSummary, require_not_null, strip_required_text

EventType = Literal[
    "wedding", "birthday", "holiday", "graduation", "anniversary", "vacation", "other"
]


class EventCreate(BaseModel):
    """
    POST /api/events body.

    family_id must name a family the caller belongs to; the caller becomes
    the event creator.
    """
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    date: datetime
    location: Optional[str] = Field(default=None, max_length=255)
    family_id: uuid.UUID
    event_type: EventType = "other"
    tags: List[str] = Field(default_factory=list)
    is_public: bool = False

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        return strip_required_text(v, "title")


class EventUpdate(BaseModel):
    """PUT /api/events/{id} body. Moving an event to another family is not supported."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    date: Optional[datetime] = None
    location: Optional[str] = Field(default=None, max_length=255)
    event_type: Optional[EventType] = None
    tags: Optional[List[str]] = None
    is_public: Optional[bool] = None

    @field_validator("title", "date", "event_type", "tags", "is_public")
    @classmethod
    def not_null(cls, v, info: ValidationInfo):
        return require_not_null(v, info.field_name)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        return strip_required_text(v, "title")


class EventResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    date: datetime
    location: Optional[str] = None
    family_id: uuid.UUID
    family_name: str
    created_by_id: uuid.UUID
    created_by: UserSummary
    event_type: str
    tags: List[str]
    is_public: bool
    media_count: int = 0
    comment_count: int = 0
    created_at: datetime
    updated_at: datetime


class EventListResponse(BaseModel):
    events: List[EventResponse]
