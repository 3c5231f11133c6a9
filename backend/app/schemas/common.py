"""
FamilyEvents Backend — Shared Schemas
=====================================

What:  Response models reused across resources (error body, health, user
       summary, simple success acknowledgements) and the null check used by
       patch schemas.
Why:   Every endpoint reports errors with the same structure, and every
       resource that references a user embeds the same summary.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class UserSummary(BaseModel):
    """
    What:  The public face of a user, embedded wherever a row references one
           (event creator, comment author, media uploader, family member).
    Why:   Never expose email_verified or timestamps of other users.
    """
    id: uuid.UUID
    name: str
    email: str
    image: Optional[str] = None

    model_config = {"from_attributes": True}


class SuccessResponse(BaseModel):
    """Acknowledgement returned by DELETE endpoints."""
    success: bool = True
    message: str = Field(default="OK")


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error code (e.g., "validation_error", "not_found")
        message: Human-readable description for display to users
        details: Optional extra context (e.g., which field failed validation)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "error": "forbidden",
            "message": "Permission denied",
            "details": {"reason": "forbidden"},
            "request_id": "550e8400"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and database status.
    Who:   Returned by GET /health for load balancer and container probes.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
    timestamp: datetime = Field(description="Server time of the check (UTC)")


def require_not_null(value: Any, field_name: str) -> Any:
    """
    Patch schemas let a non-nullable column be omitted, but not set to null.
    Called from their field validators.
    """
    if value is None:
        raise ValueError(f"{field_name} cannot be null")
    return value


def strip_required_text(value: Optional[str], field_name: str) -> Optional[str]:
    """Trim surrounding whitespace; a value that trims to nothing is rejected."""
    if value is None:
        return value
    stripped = value.strip()
    if not stripped:
        raise ValueError(f"{field_name} cannot be blank")
    return stripped


ERROR_RESPONSES = {
    400: {"description": "Validation error", "model": ErrorResponse},
    401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
    403: {"description": "Permission denied", "model": ErrorResponse},
    404: {"description": "Resource not found", "model": ErrorResponse},
}
