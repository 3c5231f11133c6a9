"""Per-user event privacy override models."""

import uuid
from datetime import datetime
from typing import List

from pydantic import BaseModel

from app.schemas.common import UserSummary


class PrivacySet(BaseModel):
    """
    POST /api/events/{id}/privacy body. Creates the override for user_id or
    replaces all four flags of an existing one.
    """
    user_id: uuid.UUID
    can_view: bool = True
    can_edit: bool = False
    can_comment: bool = True
    can_upload_media: bool = True


class PrivacyResponse(BaseModel):
    id: uuid.UUID
    event_id: uuid.UUID
    user_id: uuid.UUID
    user: UserSummary
    can_view: bool
    can_edit: bool
    can_comment: bool
    can_upload_media: bool
    created_at: datetime


class PrivacyListResponse(BaseModel):
    privacy: List[PrivacyResponse]
