"""
Domain exceptions for the back-office application.

This module defines domain-level exceptions that represent business rule
violations and the outcomes of the optimistic-concurrency protocol. These
exceptions are independent of infrastructure concerns; the HTTP layer maps
each one to a specific response.
"""

from typing import Any


class BackofficeException(Exception):
    """
    Base exception for all back-office application errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error code for API responses
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(BackofficeException):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(BackofficeException):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, "UNAUTHORIZED")


class PermissionDeniedError(BackofficeException):
    """Permission denied - principal lacks the required permission."""

    def __init__(self, permission_code: str, user_id: str | None = None):
        details: dict[str, Any] = {"permission_code": permission_code}
        if user_id:
            details["user_id"] = user_id
        super().__init__(
            f"Permission denied: {permission_code} required", "FORBIDDEN", details
        )


class NotFoundError(BackofficeException):
    """Referenced aggregate has no active (non-deleted) row."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ConflictError(BackofficeException):
    """
    The expected version no longer matches the stored version.

    Nothing was changed; the caller must re-read and retry.
    """

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        expected_version: int,
        current_version: int | None = None,
    ):
        details: dict[str, Any] = {
            "resource_type": resource_type,
            "resource_id": resource_id,
            "expected_version": expected_version,
        }
        if current_version is not None:
            details["current_version"] = current_version
        super().__init__(
            f"{resource_type} {resource_id} was modified by another user, reload and retry",
            "CONCURRENT_UPDATE_CONFLICT",
            details,
        )


class DuplicateError(BackofficeException):
    """A uniqueness constraint would be violated."""

    def __init__(self, resource_type: str, field: str, value: str):
        super().__init__(
            f"{resource_type} with {field} '{value}' already exists",
            "DUPLICATE",
            {"resource_type": resource_type, "field": field, "value": value},
        )


class InUseError(BackofficeException):
    """Deletion blocked by an active reference."""

    def __init__(self, resource_type: str, resource_id: str, referenced_by: str):
        super().__init__(
            f"{resource_type} {resource_id} is still assigned to {referenced_by}",
            "IN_USE",
            {
                "resource_type": resource_type,
                "resource_id": resource_id,
                "referenced_by": referenced_by,
            },
        )


class PolicyViolationError(BackofficeException):
    """A hard business invariant would be broken (not a concurrency issue)."""

    def __init__(self, message: str, policy: str):
        super().__init__(message, policy, {"policy": policy})


class RetrievalError(BackofficeException):
    """
    The underlying store could not be read.

    Never to be interpreted as an authorization answer.
    """

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"Failed to read from store during {operation}",
            "RETRIEVAL_ERROR",
            {"operation": operation, "reason": reason},
        )
