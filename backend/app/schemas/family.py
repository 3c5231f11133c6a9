"""
FamilyEvents Backend — Family Schemas
=====================================

What:  Request/response models for /api/families and its member routes.

Settings document:
    {"is_public": false, "allow_join_requests": true, "max_members": null}
    A partial settings object in a PUT is merged over the stored one.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator

from app.schemas.common import UserSummary, require_not_null, strip_required_text


class FamilySettings(BaseModel):
    is_public: bool = False
    allow_join_requests: bool = True
    max_members: Optional[int] = Field(default=None, ge=1)


class FamilySettingsUpdate(BaseModel):
    is_public: Optional[bool] = None
    allow_join_requests: Optional[bool] = None
    max_members: Optional[int] = Field(default=None, ge=1)


class FamilyCreate(BaseModel):
    """POST /api/families body. The caller becomes the family's first admin."""
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    settings: Optional[FamilySettings] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return strip_required_text(v, "name")


class FamilyUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    settings: Optional[FamilySettingsUpdate] = None

    @field_validator("name", "settings")
    @classmethod
    def not_null(cls, v, info: ValidationInfo):
        return require_not_null(v, info.field_name)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return strip_required_text(v, "name")


class FamilyResponse(BaseModel):
    """
    What:  A family as seen by one of its members.
    Why role: clients decide whether to show admin controls without a second
    request to the members endpoint.
    """
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    created_by_id: uuid.UUID
    settings: FamilySettings
    role: Optional[str] = Field(default=None, description="Caller's role in this family")
    member_count: int = 0
    created_at: datetime
    updated_at: datetime


class FamilyListResponse(BaseModel):
    families: List[FamilyResponse]


class FamilyMemberAdd(BaseModel):
    """POST /api/families/{id}/members body: an existing user, found by email."""
    email: EmailStr
    role: Literal["admin", "member"] = "member"


class FamilyMemberResponse(BaseModel):
    id: uuid.UUID
    family_id: uuid.UUID
    user_id: uuid.UUID
    role: str
    joined_at: datetime
    user: UserSummary


class FamilyMemberListResponse(BaseModel):
    members: List[FamilyMemberResponse]
