"""
Aquarium Log Backend: Custom Exception Hierarchy
==================================================

What:  Errors raised by services and dependencies when a request cannot be
       served: bad input, missing sign-in, foreign records, missing rows.
How:   Every error carries a user-facing message plus a context dict that
       is logged but never returned. The handlers in main.py map each
       class to its status code and JSON body.
Who:   Raised by services and dependencies; caught by global handlers.
When:  Mostly in services; routes raise only for file serving.

Exception Hierarchy:
    AquariumLogError (base)
    ├── ValidationError          → 422 Unprocessable Entity  {"errors": [...]}
    ├── BadRequestError          → 400 Bad Request           {"error": "..."}
    ├── AuthenticationError      → 401 Unauthorized          {"error": "..."}
    ├── PermissionDeniedError    → 403 Forbidden             {"error": "..."}
    ├── NotFoundError            → 404 Not Found             {"error": "..."}
    ├── FileStorageError         → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, List, Optional


class AquariumLogError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(AquariumLogError):
    """
    Raised when submitted data breaks a field or business rule.

    Carries every failing message at once so the client can show them
    together, e.g. {"errors": ["Name can't be blank", "Latitude ..."]}.
    HTTP: 422 Unprocessable Entity
    """

    def __init__(
        self,
        errors: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.errors = list(errors or ["Validation failed"])
        super().__init__(message="; ".join(self.errors), context=context)


class BadRequestError(AquariumLogError):
    """
    Raised when a required request parameter is missing or unusable.

    Example: GET /aquariums/nearby without lat/lng.
    HTTP: 400 Bad Request
    """

    def __init__(
        self,
        message: str = "Bad request",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthenticationError(AquariumLogError):
    """Raised when an endpoint needs a signed-in user. HTTP: 401"""

    def __init__(
        self,
        message: str = "ログインが必要です",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(AquariumLogError):
    """
    Raised when the signed-in user may not touch the resource.

    When: non-admin mutating an aquarium, editing another user's visit
    or profile.
    HTTP: 403 Forbidden
    """

    def __init__(
        self,
        message: str = "権限がありません",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(AquariumLogError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records; services convert that
    None into this exception so the global handler answers 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id is not None:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


class FileStorageError(AquariumLogError):
    """
    Raised when file system operations fail.

    Upload writes that hit an OSError (full disk, unwritable storage_root).
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(AquariumLogError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the SQL error
    is logged server-side only.
    HTTP: 500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
