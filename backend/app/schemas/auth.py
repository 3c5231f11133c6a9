"""Token and profile schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator

from app.schemas.common import require_not_null, strip_required_text


class ProfileResponse(BaseModel):
    id: uuid.UUID
    email: str
    name: str
    image: Optional[str] = None
    email_verified: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    """Bearer token issued by the demo sign-in endpoint."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Token lifetime in seconds")
    user: ProfileResponse


class ProfileUpdate(BaseModel):
    """
    PUT /api/profile body. Email is lower-cased before it is stored; the
    uniqueness check happens in ProfileService (409 on a taken address).
    """
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    image: Optional[str] = None

    @field_validator("name", "email")
    @classmethod
    def not_null(cls, v, info: ValidationInfo):
        return require_not_null(v, info.field_name)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return strip_required_text(v, "name")
