"""
Shared enumerations for the back-office application.

Note: aggregate-specific enums (permission type, order status) live in
backoffice/domain/enums.py as they are domain concepts.
"""

from enum import Enum


class OperationType(str, Enum):
    """Operation types recorded in the audit trail"""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    QUERY = "query"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [op.value for op in cls]


class TargetType(str, Enum):
    """Aggregate types that privileged operations act on"""

    USER = "user"
    ROLE = "role"
    PERMISSION = "permission"
    ROLE_PERMISSION = "role_permission"
    USER_ROLE = "user_role"
    CUSTOMER = "customer"
    SERVICE_ORDER = "service_order"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [target.value for target in cls]
