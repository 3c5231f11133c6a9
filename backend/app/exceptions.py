"""
FamilyEvents Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for each error outcome of a request.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers (registered in main.py) turn them into JSON
       error responses with the matching HTTP status code.
Who:   Raised by the session resolver, the access-control resolver and the
       services; caught by the global handlers.

Exception Hierarchy:
    FamilyEventsError (base)
    ├── AuthenticationError      → 401 Unauthorized (no or invalid session)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── PermissionDeniedError    → 403 Forbidden (resource exists, action denied)
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict (duplicate unique pair)
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── FileStorageError         → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error

Ordering rule:
    Services raise NotFoundError for a missing resource before they run any
    permission check against it, so a 404 always wins over a 403.
"""

from typing import Any, Dict, Optional


class FamilyEventsError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; returned only for 4xx errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class AuthenticationError(FamilyEventsError):
    """
    Raised when the request carries no usable session.

    When:    Missing Authorization header, malformed or expired token,
             token without a user id claim.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationError(FamilyEventsError):
    """
    Raised when client input fails a business-rule validation.

    Request-shape errors detected by FastAPI/Pydantic are mapped to the same
    400 response in main.py, so clients see one validation format.

    Example response:
        {
            "error": "validation_error",
            "message": "Cannot remove event creator",
            "details": {"field": "user_id"}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class PermissionDeniedError(FamilyEventsError):
    """
    Raised by the access-control resolver when an action is not allowed.

    HTTP:    403 Forbidden
    `reason` distinguishes "not_a_member" (no family membership at all) from
    "forbidden" (member, but the action needs more rights).
    """

    def __init__(
        self,
        message: str = "Permission denied",
        reason: str = "forbidden",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["reason"] = reason
        super().__init__(message=message, context=ctx)
        self.reason = reason


class NotFoundError(FamilyEventsError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that None
    into this exception so the handler can answer 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"{resource.capitalize()} not found"
            if resource_id:
                message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource


class ConflictError(FamilyEventsError):
    """
    Raised when a write would duplicate a unique pair.

    When:    Same (event, user) contributor twice, same (family, user)
             membership twice, profile email already taken.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(FamilyEventsError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests, with a Retry-After header.
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class FileStorageError(FamilyEventsError):
    """
    Raised when media file system operations fail.

    HTTP:    500. The file path and OS error go to the log, never to the client.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(FamilyEventsError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The client always gets a generic message. The SQL error, constraint
        name and query context are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
