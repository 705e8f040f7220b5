"""Domain enumerations for the back-office application."""

from enum import Enum


class PermissionType(str, Enum):
    """Permission type: guards a UI route or a backend function"""

    ROUTE = "route"
    FUNCTION = "function"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [ptype.value for ptype in cls]


class OrderType(str, Enum):
    """Service order type"""

    BUYBACK = "BUYBACK"
    CONSIGNMENT = "CONSIGNMENT"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [otype.value for otype in cls]

    @property
    def number_prefix(self) -> str:
        """Prefix used in the generated order number."""
        return "BS" if self is OrderType.BUYBACK else "CS"


class OrderSource(str, Enum):
    """Where the service order was taken"""

    OFFLINE = "OFFLINE"
    ONLINE = "ONLINE"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [source.value for source in cls]


class OrderStatus(str, Enum):
    """Service order status"""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    TERMINATED = "TERMINATED"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [status.value for status in cls]
