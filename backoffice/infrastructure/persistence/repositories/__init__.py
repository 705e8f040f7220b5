from backoffice.infrastructure.persistence.repositories.assignment_repo import AssignmentRepository
from backoffice.infrastructure.persistence.repositories.audit_log_repo import (
    AuditLogFilter,
    AuditLogRepository,
    PermissionFailureLogRepository,
)
from backoffice.infrastructure.persistence.repositories.customer_repo import CustomerRepository
from backoffice.infrastructure.persistence.repositories.permission_repo import PermissionRepository
from backoffice.infrastructure.persistence.repositories.role_repo import RoleRepository
from backoffice.infrastructure.persistence.repositories.service_order_repo import (
    ServiceOrderRepository,
)
from backoffice.infrastructure.persistence.repositories.user_repo import UserRepository
from backoffice.infrastructure.persistence.repositories.versioned_repo import VersionedRepository

__all__ = [
    "AssignmentRepository",
    "AuditLogFilter",
    "AuditLogRepository",
    "CustomerRepository",
    "PermissionFailureLogRepository",
    "PermissionRepository",
    "RoleRepository",
    "ServiceOrderRepository",
    "UserRepository",
    "VersionedRepository",
]
