"""
WebVault Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the different error scenarios.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers (registered in main.py) turn them into the
       fail/error response envelopes with the right HTTP status.
Who:   Raised by services, dependencies and routes; caught by global handlers.

Exception Hierarchy:
    WebVaultError (base)
    ├── ValidationError         → 422 fail  (validation_failed)
    ├── NotFoundError           → 404 fail  (not_found)
    ├── UnauthenticatedError    → 401 fail  (unauthenticated)
    ├── ConflictError           → 409 fail  (conflict)
    ├── UpstreamServiceError    → 502 error (caller-supplied code)
    └── DatabaseError           → 500 error (internal_error)

The `context` dict is logged server-side and never returned to the client.
"""

from typing import Any, Dict, List, Optional


class WebVaultError(Exception):
    """
    Base exception for all WebVault application errors.

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


class ValidationError(WebVaultError):
    """
    Raised when client input fails validation (HTTP 422).

    `errors` is the field-keyed map returned in the fail envelope. When only
    a single `field` is given the message is filed under that field.

    Example response:
        {
            "status": "fail",
            "code": "validation_failed",
            "message": "Validation failed",
            "errors": {"ids": ["Unknown website id(s): abc"]}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[Dict[str, List[str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        if errors is None:
            errors = {field: [message]} if field else {}
        self.errors = errors


class NotFoundError(WebVaultError):
    """
    Raised when a requested resource does not exist (HTTP 404).

    SQLAlchemy returns None for missing rows; services convert that into
    this exception so routes stay free of HTTP status logic.
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
        self.resource = resource
        self.resource_id = resource_id


class UnauthenticatedError(WebVaultError):
    """Raised when a route requires a session and none is present (HTTP 401)."""

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConflictError(WebVaultError):
    """
    Raised when a write would break a referential rule (HTTP 409).

    Example: deleting a tag that is still assigned to websites.
    """

    def __init__(
        self,
        message: str = "The resource is in use",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UpstreamServiceError(WebVaultError):
    """
    Raised when a third-party service (the identity provider) fails after
    retries.

    `code` becomes the envelope's error code (e.g. "sign_out_failed") and
    `status_code` the HTTP status.
    """

    def __init__(
        self,
        message: str = "An upstream service is temporarily unavailable",
        code: str = "upstream_error",
        status_code: int = 502,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.code = code
        self.status_code = status_code


class DatabaseError(WebVaultError):
    """
    Raised when database operations fail unexpectedly (HTTP 500).

    The client always receives a generic message; the SQL error itself is
    only logged.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
