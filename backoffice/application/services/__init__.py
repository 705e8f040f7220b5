from backoffice.application.services.access_denial_service import AccessDenialService
from backoffice.application.services.account_service import AccountProfile, AccountService
from backoffice.application.services.audit_service import AuditService
from backoffice.application.services.authorization_service import (
    AuthorizationService,
    GrantedPermission,
)
from backoffice.application.services.concurrency import VersionedMutator
from backoffice.application.services.customer_service import CustomerService
from backoffice.application.services.permission_service import PermissionService
from backoffice.application.services.role_service import RoleService
from backoffice.application.services.service_order_service import ServiceOrderService
from backoffice.application.services.user_role_service import UserRoleService

__all__ = [
    "AccessDenialService",
    "AccountProfile",
    "AccountService",
    "AuditService",
    "AuthorizationService",
    "CustomerService",
    "GrantedPermission",
    "PermissionService",
    "RoleService",
    "ServiceOrderService",
    "UserRoleService",
    "VersionedMutator",
]
