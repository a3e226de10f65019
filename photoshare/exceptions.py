"""
Photoshare Backend - Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for each failure the API reports.
How:   Each exception carries a user-safe message and an optional context dict.
       Global handlers registered in main.py map them to HTTP status codes and
       the shared JSON error body.
Who:   Raised by services and dependencies; caught by the global handlers.

Exception Hierarchy:
    PhotoshareError (base)                → 500
    ├── ValidationError                   → 400 Bad Request
    ├── UnauthorizedError                 → 401 Unauthorized
    │   ├── InvalidTokenError             → 401 (missing/bad/expired token)
    │   └── InvalidCredentialsError       → 401 (login failure)
    ├── NotFoundError                     → 404 Not Found
    ├── DuplicateError                    → 409 Conflict
    ├── FileStorageError                  → 500 Internal Server Error
    └── DatabaseError                     → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class PhotoshareError(Exception):
    """
    Base exception for all Photoshare application errors.

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


class ValidationError(PhotoshareError):
    """
    Raised when client input fails validation.

    When:    Missing or empty required field, missing upload, unsupported file.
    HTTP:    400 Bad Request
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


class UnauthorizedError(PhotoshareError):
    """
    Raised when a protected operation is attempted without valid authentication.

    HTTP:    401 Unauthorized, with `WWW-Authenticate: Bearer`
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidTokenError(UnauthorizedError):
    """Bearer token is missing, malformed, expired, or carries a bad signature."""

    def __init__(
        self,
        message: str = "Invalid or expired token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidCredentialsError(UnauthorizedError):
    """
    Login failed.

    Unknown identifier and wrong password share this exception and its message
    so the response does not reveal whether an account exists.
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid login credentials", context=context)


class NotFoundError(PhotoshareError):
    """
    Raised when a referenced resource does not exist.

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


class DuplicateError(PhotoshareError):
    """
    Raised when a create would violate a uniqueness constraint.

    When:    Registering a username or email that is already taken.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(PhotoshareError):
    """
    Raised when file system operations fail (disk full, permission denied).

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(PhotoshareError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; SQL, constraint
    names and driver errors go to the server log only.

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
