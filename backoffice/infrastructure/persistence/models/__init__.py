from backoffice.infrastructure.persistence.models.audit_log import AuditLog, PermissionFailureLog
from backoffice.infrastructure.persistence.models.customer import Customer
from backoffice.infrastructure.persistence.models.permission import (
    Permission,
    RolePermission,
    UserRole,
)
from backoffice.infrastructure.persistence.models.role import Role
from backoffice.infrastructure.persistence.models.service_order import ServiceOrder
from backoffice.infrastructure.persistence.models.user import User

__all__ = [
    "AuditLog",
    "Customer",
    "Permission",
    "PermissionFailureLog",
    "Role",
    "RolePermission",
    "ServiceOrder",
    "User",
    "UserRole",
]
