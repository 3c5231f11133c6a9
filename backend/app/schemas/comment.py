"""
FamilyEvents Backend — Comment Schemas
======================================

Threading:
    GET returns only top-level comments at the root of the list; each
    comment carries its direct replies in `replies`, recursively.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.models.comment import MAX_COMMENT_LENGTH
from app.schemas.common import UserSummary, strip_required_text


class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=MAX_COMMENT_LENGTH)
    parent_id: Optional[uuid.UUID] = Field(
        default=None, description="Comment being replied to (same event)"
    )

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        return strip_required_text(v, "content")


class CommentUpdate(BaseModel):
    content: str = Field(min_length=1, max_length=MAX_COMMENT_LENGTH)

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        return strip_required_text(v, "content")


class CommentResponse(BaseModel):
    id: uuid.UUID
    event_id: uuid.UUID
    author_id: uuid.UUID
    author: UserSummary
    content: str
    parent_id: Optional[uuid.UUID] = None
    is_edited: bool
    created_at: datetime
    updated_at: datetime
    replies: List["CommentResponse"] = Field(default_factory=list)


class CommentListResponse(BaseModel):
    comments: List[CommentResponse]


CommentResponse.model_rebuild()
