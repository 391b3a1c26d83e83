"""
Apna SAHE Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the error scenarios the API exposes.
Why:   Services raise domain errors; global handlers in main.py turn them into
       HTTP responses with the right status code, so no route needs its own
       try/except.
How:   Each exception carries a user-facing message and an optional context
       dict (logged, and returned as `details` for client errors only).

Exception Hierarchy:
    SaheError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── PermissionDeniedError    → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    ├── MediaServiceError        → 500 Internal Server Error
    ├── StorageError             → 500 Internal Server Error
    ├── DatabaseError            → 500 Internal Server Error
    └── AuthProviderError        → 503 Service Unavailable
"""

from typing import Any, Dict, Optional


class SaheError(Exception):
    """
    Base exception for all Apna SAHE application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SaheError):
    """
    Raised when client input fails a business rule.

    When:    Non-PDF upload, oversized file, wrong email domain, empty update,
             missing noteId.
    HTTP:    400 Bad Request

    Schema-level problems (wrong types, missing required fields) are still
    reported by FastAPI as 422.
    """

    status_code = 400
    error_code = "validation_error"

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


class AuthenticationError(SaheError):
    """
    Raised when the caller cannot be identified.

    When:    Missing or malformed Authorization header, invalid/expired/revoked
             ID token, wrong password at sign-in.
    HTTP:    401 Unauthorized
    """

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(SaheError):
    """
    Raised when an identified caller is neither the owner nor an admin.

    HTTP:    403 Forbidden
    """

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SaheError):
    """
    Raised when a requested document does not exist.

    The message is passed through verbatim ("Note not found", "User data not
    found", ...) because the frontend shows it as-is.

    HTTP:    404 Not Found
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        message: str = "The requested resource was not found",
        resource: Optional[str] = None,
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource:
            ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(SaheError):
    """
    Raised when a create would collide with an existing record.

    When:    Registering an email that already has an auth account.
    HTTP:    409 Conflict
    """

    status_code = 409
    error_code = "conflict"


class MediaServiceError(SaheError):
    """
    Raised when the media host (Cloudinary) rejects or fails an operation.

    When:    Upload failed after retries, destroy returned something other than
             "ok" / "not found".
    HTTP:    500 Internal Server Error

    The message is returned to the client ("Cloudinary destroy failed: ...")
    since it carries no secrets and the admin UI displays it.
    """

    status_code = 500
    error_code = "media_service_error"

    def __init__(
        self,
        message: str = "Media host operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageError(SaheError):
    """
    Raised when a Firebase Storage blob operation fails.

    HTTP:    500 Internal Server Error
    """

    status_code = 500
    error_code = "storage_error"

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(SaheError):
    """
    Raised when a Firestore read, write or transaction fails unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The client always gets a generic message. The underlying Google API
        error is logged server-side only.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthProviderError(SaheError):
    """
    Raised when the auth provider itself is unreachable or misconfigured.

    When:    Identity Toolkit unreachable after retries, web API key missing,
             certificate fetch failure during token verification.
    HTTP:    503 Service Unavailable
    """

    status_code = 503
    error_code = "auth_provider_unavailable"

    def __init__(
        self,
        message: str = "Authentication service is temporarily unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
