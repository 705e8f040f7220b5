"""
Domain layer - Enterprise Business Rules.

This is the innermost layer containing enums, value objects and domain
exceptions. It has no dependencies on other layers.
"""

from backoffice.domain.enums import OrderSource, OrderStatus, OrderType, PermissionType
from backoffice.domain.exceptions import (
    AuthenticationException,
    BackofficeException,
    ConflictError,
    DuplicateError,
    InUseError,
    NotFoundError,
    PermissionDeniedError,
    PolicyViolationError,
    RetrievalError,
    ValidationException,
)
from backoffice.domain.value_objects import PermissionCode, permission_matches

__all__ = [
    # Value Objects
    "PermissionCode",
    "permission_matches",
    # Enums
    "PermissionType",
    "OrderType",
    "OrderSource",
    "OrderStatus",
    # Exceptions
    "BackofficeException",
    "ValidationException",
    "AuthenticationException",
    "PermissionDeniedError",
    "NotFoundError",
    "ConflictError",
    "DuplicateError",
    "InUseError",
    "PolicyViolationError",
    "RetrievalError",
]
