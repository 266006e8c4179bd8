"""
CritterTrack Backend — Custom Exception Hierarchy
=================================================

What:  Defines application-specific exceptions for the error taxonomy.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-friendly messages, without leaking internals.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services, the auth gate and the credential stores (for
       infrastructure faults only); caught by global handlers.

Exception Hierarchy:
    CritterTrackError (base)
    ├── ValidationError         → 400 Bad Request (client can fix)
    ├── UnauthenticatedError    → 401 Unauthorized
    ├── NotFoundError           → 404 Not Found (absent OR not owned)
    ├── ConflictError           → 409 Conflict (unique constraint)
    ├── StoreUnavailableError   → 500 Internal Server Error (transient)
    └── FileStorageError        → 500 Internal Server Error

Stores never raise for domain outcomes: they return None / 0 / an empty
list, and the services translate those into NotFoundError or ConflictError.
"""

from typing import Any, Dict, Optional


class CritterTrackError(Exception):
    """
    Base exception for all CritterTrack application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client
                  unless the handler opts in)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CritterTrackError):
    """
    Raised when client input fails validation.

    When:    Blank email, short password, blank search term, bad upload.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Password must be at least 12 characters long.",
            "details": {"field": "password"}
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


class UnauthenticatedError(CritterTrackError):
    """
    Raised when a request carries no usable identity.

    When:    Missing bearer token, bad signature, wrong audience/issuer,
             expired token, malformed token, or bad login credentials.
    HTTP:    401 Unauthorized

    The message never says which of those happened.
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(CritterTrackError):
    """
    Raised when a requested resource does not exist for the caller.

    When:    GET/PUT/DELETE on an animal or litter id that is absent, OR that
             belongs to another user. Both cases produce the same response
             so that a caller cannot probe for other users' records.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(CritterTrackError):
    """
    Raised when a write would violate a uniqueness rule.

    When:    Registering an email that is already taken.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "The resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreUnavailableError(CritterTrackError):
    """
    Raised when the credential store cannot be reached or fails unexpectedly.

    When:    Connection lost, pool wait timed out, remote data API returned
             5xx or an unexpected status, transport error.
    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. Driver errors,
        SQL text and remote response bodies are logged server-side only.
        Nothing is retried; the caller sees the failure immediately.
    """

    def __init__(
        self,
        message: str = "The data store is temporarily unavailable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(CritterTrackError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error,
             MIME detection unavailable.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
