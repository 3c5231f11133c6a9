"""Notification request/response models."""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

NotificationType = Literal["comment", "media_upload", "event_update", "invitation", "system"]


class NotificationCreate(BaseModel):
    type: NotificationType
    title: str = Field(min_length=1, max_length=100)
    message: str = Field(min_length=1, max_length=500)
    reference_id: Optional[uuid.UUID] = None
    reference_type: Optional[str] = Field(default=None, max_length=50)


class NotificationUpdate(BaseModel):
    is_read: bool


class NotificationResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    type: str
    title: str
    message: str
    reference_id: Optional[uuid.UUID] = None
    reference_type: Optional[str] = None
    is_read: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int = Field(description="Unread notifications of the caller, ignoring limit")
