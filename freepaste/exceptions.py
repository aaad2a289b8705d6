"""
FreePaste — Custom Exception Hierarchy
========================================

What:  Application-specific exceptions for each failure the paste API can report.
How:   Each exception carries a user-safe message and an optional context dict.
       Global exception handlers (registered in main.py) map them to HTTP
       status codes and structured JSON error bodies.
Who:   Raised by repositories and services; caught by global handlers.

Exception Hierarchy:
    FreePasteError (base)
    ├── ValidationError              → 400 Bad Request
    │   ├── EmptyContentError
    │   └── ContentTooLargeError
    ├── AuthError                    → 403 Forbidden
    │   ├── TokenRequiredError
    │   └── ForbiddenError
    ├── NotFoundError                → 404 Not Found
    ├── StorageError                 → 500 Internal Server Error
    ├── IdExhaustedError             → 500 Internal Server Error
    └── DuplicatePasteIdError        (internal: repository → service only)
"""

from typing import Any, Dict, Optional


class FreePasteError(Exception):
    """
    Base exception for all FreePaste application errors.

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


class ValidationError(FreePasteError):
    """
    Raised when client input fails validation.

    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Content must not be empty",
            "details": {"field": "content"}
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


class EmptyContentError(ValidationError):
    """Paste content is absent or only whitespace."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Content must not be empty", field="content", context=context)


class ContentTooLargeError(ValidationError):
    """Paste content exceeds the UTF-8 byte limit."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            message=f"Content exceeds the maximum size of {limit // (1024 * 1024)}MB",
            field="content",
            context={"size_bytes": size, "max_bytes": limit},
        )
        self.size = size
        self.limit = limit


class AuthError(FreePasteError):
    """
    Raised when the owner token is missing or does not match.

    HTTP:    403 Forbidden
    """


class TokenRequiredError(AuthError):
    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Token required", context=context)


class ForbiddenError(AuthError):
    def __init__(self, paste_id: Optional[str] = None):
        ctx = {"paste_id": paste_id} if paste_id else {}
        super().__init__(message="You are not allowed to edit this paste", context=ctx)


class NotFoundError(FreePasteError):
    """
    Raised when a requested paste does not exist.

    HTTP:    404 Not Found

    Repositories return None for missing rows; the service layer converts
    that into this exception so routes stay free of lookup logic.
    """

    def __init__(
        self,
        resource: str = "paste",
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


class StorageError(FreePasteError):
    """
    Raised when a storage operation fails for any reason other than an id collision.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. Driver errors,
        constraint names and URIs are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DuplicatePasteIdError(FreePasteError):
    """
    Raised by a repository when the storage uniqueness constraint rejects an id.

    Never surfaces to a client: PasteService retries with a fresh id and
    converts exhaustion into IdExhaustedError.
    """

    def __init__(self, paste_id: str):
        super().__init__(
            message=f"Paste id '{paste_id}' is already taken",
            context={"paste_id": paste_id},
        )
        self.paste_id = paste_id


class IdExhaustedError(FreePasteError):
    """
    Raised when every insert attempt collided with an existing id.

    HTTP:    500 Internal Server Error
    """

    def __init__(self, attempts: int):
        super().__init__(
            message="Too many attempts to generate a unique ID",
            context={"attempts": attempts},
        )
        self.attempts = attempts
