"""Media request/response models."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import UserSummary
from app.services.file_service import FILES_URL_PREFIX


class MediaCreate(BaseModel):
    """
    POST /api/events/{id}/media body: metadata for a file already hosted
    elsewhere. Files uploaded through /media/upload get these fields filled in
    by the server.
    """
    filename: str = Field(min_length=1, max_length=255)
    original_name: str = Field(min_length=1, max_length=255)
    mime_type: str = Field(min_length=1, max_length=100)
    size: int = Field(gt=0, description="Bytes")
    url: Optional[str] = None
    alt_text: Optional[str] = None
    is_public: bool = False

    @field_validator("url")
    @classmethod
    def not_a_storage_url(cls, v: Optional[str]) -> Optional[str]:
        # Storage URLs are issued by the upload endpoint only
        if v is not None and v.strip().startswith(FILES_URL_PREFIX):
            raise ValueError("url may not point into local storage; use /media/upload")
        return v


class MediaResponse(BaseModel):
    id: uuid.UUID
    event_id: uuid.UUID
    uploaded_by_id: uuid.UUID
    uploaded_by: UserSummary
    filename: str
    original_name: str
    mime_type: str
    size: int
    url: Optional[str] = None
    alt_text: Optional[str] = None
    is_public: bool
    created_at: datetime


class MediaListResponse(BaseModel):
    media: List[MediaResponse]
