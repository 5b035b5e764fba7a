"""Domain exceptions for the Legality portal.

Defines domain-level exceptions that represent business rule violations and
the failure kinds of the remote store and identity provider. Presentation
layer maps them to HTTP responses in exception handlers; use cases convert
them to failure results.
"""

from typing import Any


class LegalityException(Exception):
    """Base exception for all Legality portal errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by the HTTP exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(LegalityException):
    """Raised when input validation fails (e.g. blank title, unknown estado)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(LegalityException):
    """Raised when authentication fails (invalid credentials, expired token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(LegalityException):
    """Raised when the current profile's role does not allow the operation."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'caso', 'tarea').
            action: Optional action that was attempted (e.g. 'delete').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(LegalityException):
    """Raised when a requested row is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ProfileNotFoundException(ResourceNotFoundException):
    """Raised when no profile row exists yet for an identity.

    Expected after sign-up: the resolver provisions a profile instead of
    surfacing this to the user.
    """

    def __init__(self, user_id: str) -> None:
        super().__init__("profile", user_id)
        self.error_code = "PROFILE_NOT_FOUND"


class StoreUnavailableException(LegalityException):
    """Raised when the remote store or identity provider cannot be reached."""

    def __init__(
        self, message: str = "Remote store unavailable", status_code: int | None = None
    ) -> None:
        details = {"status_code": status_code} if status_code is not None else {}
        super().__init__(message, "STORE_UNAVAILABLE", details)


class StoreRequestException(LegalityException):
    """Raised when the store rejects a request (constraint violation, bad filter, RLS).

    Attributes:
        code: Store error code (PostgREST 'PGRSTxxx' or a Postgres SQLSTATE).
        status_code: HTTP status returned by the store.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        status_code: int | None = None,
        hint: str | None = None,
    ) -> None:
        self.code = code
        self.status_code = status_code
        details: dict[str, Any] = {"code": code, "status_code": status_code}
        if hint:
            details["hint"] = hint
        super().__init__(message, "STORE_REQUEST_ERROR", details)
