"""
LinguaHub Backend — Error Types
=================================

Every error a service raises on purpose is a LinguaHubError. The class
decides the HTTP status and the machine-readable `error` code; the instance
carries the user-facing message and a context dict for the logs.

    LinguaHubError                     500  server_error
    ├── ValidationError                400  validation_error
    │   └── NoChangesError             400  no_changes
    ├── ConflictError                  400  conflict
    ├── AuthenticationError            401  unauthorized
    ├── NotFoundError                  404  not_found
    ├── RateLimitExceededError         429  rate_limit_exceeded
    ├── FileStorageError               500  file_storage_error
    └── DatabaseError                  500  database_error

The handler in main.py turns any of them into
    {"success": false, "error": <code>, "message": <public_message>, "request_id": ...}

Duplicate registrations answer 400, not 409: the web client has always
branched on 400 for "User already exists!".
"""

from typing import Any, Dict, Optional


class LinguaHubError(Exception):
    """
    Attributes:
        message: what went wrong, safe to show the client
        context: extra detail for the server log only
    """

    status_code: int = 500
    error_code: str = "server_error"
    # When True, context is returned to the client as "details"
    expose_context: bool = False

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = dict(context or {})
        super().__init__(message)

    @property
    def public_message(self) -> str:
        return self.message

    @property
    def public_details(self) -> Optional[Dict[str, Any]]:
        return self.context if self.expose_context and self.context else None


class ValidationError(LinguaHubError):
    """
    Client input the client can fix: missing fields, mismatched passwords,
    malformed questions JSON, unsupported or oversized uploads.
    """

    status_code = 400
    error_code = "validation_error"
    expose_context = True

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
        self.field = field
        if field:
            self.context["field"] = field


class NoChangesError(ValidationError):
    """The target exists but the update would leave it exactly as it is."""

    error_code = "no_changes"

    def __init__(self, message: str = "No changes made", context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context=context)


class ConflictError(LinguaHubError):
    status_code = 400
    error_code = "conflict"

    def __init__(self, message: str = "Resource already exists", context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)


class AuthenticationError(LinguaHubError):
    status_code = 401
    error_code = "unauthorized"

    def __init__(self, message: str = "Invalid credentials", context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)


class NotFoundError(LinguaHubError):
    """
    Unknown user email, no package document to append to, or a stored file
    that is not on disk.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = (
                f"{resource} '{resource_id}' was not found"
                if resource_id
                else f"The requested {resource} was not found"
            )
        super().__init__(message, context)
        self.resource = resource
        self.context["resource"] = resource
        if resource_id:
            self.context["resource_id"] = resource_id


class RateLimitExceededError(LinguaHubError):
    status_code = 429
    error_code = "rate_limit_exceeded"
    expose_context = True

    def __init__(self, retry_after: int = 60, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests.",
            context,
        )
        self.retry_after = retry_after
        self.context["retry_after"] = retry_after

    @property
    def public_details(self) -> Optional[Dict[str, Any]]:
        # Client IP stays in the log
        return {"retry_after": self.retry_after}


class FileStorageError(LinguaHubError):
    """Disk full, permission denied, unwritable directory."""

    error_code = "file_storage_error"

    def __init__(self, message: str = "File storage operation failed", context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)


class DatabaseError(LinguaHubError):
    """
    A document store call failed unexpectedly.

    The service-level message and driver details are logged; the client
    only ever sees the generic public_message.
    """

    error_code = "database_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)

    @property
    def public_message(self) -> str:
        return "An internal error occurred. Please try again later."
