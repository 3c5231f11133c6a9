"""Contributor request/response models."""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ValidationInfo, field_validator

from app.schemas.common import UserSummary, require_not_null

ContributorRole = Literal["owner", "editor", "viewer"]


class ContributorCreate(BaseModel):
    user_id: uuid.UUID
    role: ContributorRole = "editor"
    can_edit: bool = True
    can_delete: bool = False
    can_invite: bool = False


class ContributorUpdate(BaseModel):
    role: Optional[ContributorRole] = None
    can_edit: Optional[bool] = None
    can_delete: Optional[bool] = None
    can_invite: Optional[bool] = None

    @field_validator("role", "can_edit", "can_delete", "can_invite")
    @classmethod
    def not_null(cls, v, info: ValidationInfo):
        return require_not_null(v, info.field_name)


class ContributorResponse(BaseModel):
    id: uuid.UUID
    event_id: uuid.UUID
    user_id: uuid.UUID
    user: UserSummary
    role: str
    added_by_id: uuid.UUID
    added_by: UserSummary
    can_edit: bool
    can_delete: bool
    can_invite: bool
    created_at: datetime


class ContributorListResponse(BaseModel):
    contributors: List[ContributorResponse]
