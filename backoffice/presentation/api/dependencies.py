from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.application.services.access_denial_service import (
    AccessDenialService,
    missing_permission_reason,
)
from backoffice.application.services.account_service import AccountService
from backoffice.application.services.audit_service import AuditService
from backoffice.application.services.authorization_service import AuthorizationService
from backoffice.application.services.customer_service import CustomerService
from backoffice.application.services.permission_service import PermissionService
from backoffice.application.services.role_service import RoleService
from backoffice.application.services.service_order_service import ServiceOrderService
from backoffice.application.services.user_role_service import UserRoleService
from backoffice.domain.exceptions import AuthenticationException, PermissionDeniedError
from backoffice.infrastructure.cache.redis_cache import CacheService
from backoffice.infrastructure.config.settings import get_settings
from backoffice.infrastructure.persistence.database import get_db, get_db_transactional
from backoffice.infrastructure.persistence.repositories.assignment_repo import (
    AssignmentRepository,
)
from backoffice.infrastructure.persistence.repositories.user_repo import UserRepository
from backoffice.infrastructure.security.jwt import verify_token
from backoffice.presentation.api.v1.schemas.token import CurrentUser, TokenPayload
from backoffice.shared.context import get_actor_context, set_current_user

security = HTTPBearer(auto_error=False)

# Global service instances (singletons)
_cache_service: CacheService | None = None


async def get_cache_service() -> CacheService:
    """
    Cache service dependency (singleton)

    Returns global cache service instance.
    Connected on app startup in main.py; unconnected it is a no-op.
    """
    global _cache_service
    if _cache_service is None:
        _cache_service = CacheService()
    return _cache_service


def set_cache_service(cache_service: CacheService | None):
    """Set global cache service (called on app startup)"""
    global _cache_service
    _cache_service = cache_service


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """
    Validate the JWT and load the principal it names.

    Token must contain a 'sub' (user_id) claim of an active account. The
    principal is published to the request context for audit stamping.
    """
    if credentials is None:
        raise AuthenticationException("Not authenticated")
    try:
        token_data = TokenPayload(**verify_token(credentials.credentials))
    except (ValueError, TypeError) as e:
        raise AuthenticationException(f"Invalid authentication credentials: {e}") from e

    user = await UserRepository(db).get_active(token_data.sub)
    if user is None:
        raise AuthenticationException("Account not found or deleted")

    set_current_user(user.id, user.display_name)
    return CurrentUser.model_validate(user)


async def get_authz_service(
    db: AsyncSession = Depends(get_db), cache: CacheService = Depends(get_cache_service)
) -> AuthorizationService:
    """Authorization service; one resolved set per principal per request"""
    return AuthorizationService(
        AssignmentRepository(db), cache=cache, cache_ttl=get_settings().cache_ttl_permissions
    )


async def enforce_permission(
    request: Request,
    user: CurrentUser,
    permission_code: str,
    authz: AuthorizationService,
    db: AsyncSession,
) -> None:
    """
    Authorize ``user`` for ``permission_code`` or record the denial and raise.

    The denial entry is committed on the read session so it survives the
    rollback of the request's write transaction.
    """
    if await authz.authorize(user.id, permission_code):
        return

    actor = get_actor_context()
    await AccessDenialService(db).record(
        user_id=user.id,
        username=user.display_name,
        attempted_resource=f"{request.method} {request.url.path}",
        reason=missing_permission_reason(permission_code),
        ip_address=actor.ip_address,
        user_agent=actor.user_agent,
        trace_id=actor.trace_id,
    )
    await db.commit()
    raise PermissionDeniedError(permission_code, user.id)


def require_permission(permission_code: str):
    """
    Dependency factory for route-level permission checking.

    Usage:
        @router.post("/customers", dependencies=[Depends(require_permission("customer.create"))])
        async def create_customer(...):
            ...
    """

    async def permission_checker(
        request: Request,
        user: CurrentUser = Depends(get_current_user),
        authz: AuthorizationService = Depends(get_authz_service),
        db: AsyncSession = Depends(get_db),
    ) -> CurrentUser:
        await enforce_permission(request, user, permission_code, authz, db)
        return user

    return permission_checker


# Read-side services


async def get_audit_service(db: AsyncSession = Depends(get_db)) -> AuditService:
    return AuditService(db)


async def get_access_denial_service(db: AsyncSession = Depends(get_db)) -> AccessDenialService:
    return AccessDenialService(db)


# Transactional dependencies for write operations


async def get_audit_service_transactional(
    db: AsyncSession = Depends(get_db_transactional),
) -> AuditService:
    """Audit recorder sharing the request's write transaction"""
    return AuditService(db)


async def get_authz_service_transactional(
    db: AsyncSession = Depends(get_db_transactional),
    cache: CacheService = Depends(get_cache_service),
) -> AuthorizationService:
    """Authorization service whose cache invalidation waits for the commit"""
    return AuthorizationService(
        AssignmentRepository(db),
        cache=cache,
        cache_ttl=get_settings().cache_ttl_permissions,
        session=db,
    )


async def get_account_service(
    db: AsyncSession = Depends(get_db_transactional),
    audit: AuditService = Depends(get_audit_service_transactional),
    authz: AuthorizationService = Depends(get_authz_service_transactional),
) -> AccountService:
    return AccountService(db, audit, authz)


async def get_role_service(
    db: AsyncSession = Depends(get_db_transactional),
    audit: AuditService = Depends(get_audit_service_transactional),
    authz: AuthorizationService = Depends(get_authz_service_transactional),
) -> RoleService:
    return RoleService(db, audit, authz)


async def get_permission_service(
    db: AsyncSession = Depends(get_db_transactional),
    audit: AuditService = Depends(get_audit_service_transactional),
    authz: AuthorizationService = Depends(get_authz_service_transactional),
) -> PermissionService:
    return PermissionService(db, audit, authz)


async def get_user_role_service(
    db: AsyncSession = Depends(get_db_transactional),
    audit: AuditService = Depends(get_audit_service_transactional),
    authz: AuthorizationService = Depends(get_authz_service_transactional),
) -> UserRoleService:
    return UserRoleService(db, audit, authz)


async def get_customer_service(
    db: AsyncSession = Depends(get_db_transactional),
    audit: AuditService = Depends(get_audit_service_transactional),
) -> CustomerService:
    return CustomerService(db, audit)


async def get_service_order_service(
    db: AsyncSession = Depends(get_db_transactional),
    audit: AuditService = Depends(get_audit_service_transactional),
) -> ServiceOrderService:
    return ServiceOrderService(db, audit)
