"""
Permission resolution engine.

A principal's effective permission set is the union of the non-deleted
permissions of every active role it holds. Authorization checks a required
code, which may contain single-segment wildcards, against that set.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError

from backoffice.domain.exceptions import PermissionDeniedError, RetrievalError
from backoffice.domain.value_objects import permission_matches
from backoffice.infrastructure.persistence.database import call_after_commit
from backoffice.shared.telemetry.logging import get_logger
from backoffice.shared.telemetry.tracing import add_span_attributes, traced

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from backoffice.application.interfaces.repositories import AssignmentStore
    from backoffice.infrastructure.cache.redis_cache import CacheService

logger = get_logger(__name__)

CACHE_KEY_PREFIX = "permissions"


@dataclass(frozen=True)
class GrantedPermission:
    """A permission held by a principal through at least one role."""

    id: str
    permission_code: str
    name: str
    permission_type: str
    route_path: str | None = None

    @classmethod
    def from_model(cls, permission: Any) -> GrantedPermission:
        return cls(
            id=permission.id,
            permission_code=permission.permission_code,
            name=permission.name,
            permission_type=permission.permission_type,
            route_path=permission.route_path,
        )


class AuthorizationService:
    """
    Resolves and checks permissions for a principal.

    Resolved sets are memoised for the lifetime of the instance (one request)
    and, when a CacheService is connected, shared across requests until a
    mutation invalidates them or the TTL expires. When bound to a write
    ``session``, shared entries are cleared only after that session commits,
    so a concurrent reader cannot re-cache rows the writer is replacing.
    """

    def __init__(
        self,
        assignments: AssignmentStore,
        cache: CacheService | None = None,
        cache_ttl: int = 300,
        session: AsyncSession | None = None,
    ):
        self.assignments = assignments
        self.session = session
        self.cache = cache
        self.cache_ttl = cache_ttl
        self._resolved: dict[str, list[GrantedPermission]] = {}

    @staticmethod
    def _cache_key(user_id: str) -> str:
        return f"{CACHE_KEY_PREFIX}:{user_id}"

    @traced("authorization.resolve")
    async def resolve_effective_permissions(self, user_id: str) -> list[GrantedPermission]:
        """
        Merge the permissions of all active roles held by ``user_id``.

        De-duplicated by permission id, first-seen wins. A principal with no
        active roles resolves to an empty list.

        Raises:
            RetrievalError: The store could not be read
        """
        if user_id in self._resolved:
            return self._resolved[user_id]

        if self.cache:
            cached = await self.cache.get(self._cache_key(user_id))
            if cached is not None:
                permissions = [GrantedPermission(**item) for item in cached]
                self._resolved[user_id] = permissions
                return permissions

        try:
            role_ids = await self.assignments.get_active_role_ids_for_user(user_id)
            merged: dict[str, GrantedPermission] = {}
            for role_id in role_ids:
                for permission in await self.assignments.get_permissions_for_role(role_id):
                    if permission.id not in merged:
                        merged[permission.id] = GrantedPermission.from_model(permission)
        except SQLAlchemyError as e:
            logger.error("Failed to resolve permissions for user %s: %s", user_id, e)
            raise RetrievalError("resolve_effective_permissions", str(e)) from e

        permissions = list(merged.values())
        self._resolved[user_id] = permissions

        if self.cache:
            await self.cache.set(
                self._cache_key(user_id),
                [asdict(permission) for permission in permissions],
                ttl=self.cache_ttl,
            )

        return permissions

    @traced("authorization.authorize")
    async def authorize(self, user_id: str, required_code: str) -> bool:
        """
        True if any effective permission satisfies ``required_code``.

        Never answers False because of a store failure; RetrievalError
        propagates instead.
        """
        add_span_attributes(user_id=user_id, required_code=required_code)
        permissions = await self.resolve_effective_permissions(user_id)
        for permission in permissions:
            if permission_matches(permission.permission_code, required_code):
                return True

        logger.debug("User %s lacks permission %s", user_id, required_code)
        return False

    async def require_permission(self, user_id: str, required_code: str) -> None:
        """Raise PermissionDeniedError unless authorize() answers True"""
        if not await self.authorize(user_id, required_code):
            raise PermissionDeniedError(required_code, user_id)

    async def check_permissions(self, user_id: str, codes: list[str]) -> dict[str, bool]:
        """Answer several checks against one resolved set"""
        return {code: await self.authorize(user_id, code) for code in codes}

    async def get_permission_codes(self, user_id: str) -> list[str]:
        """Sorted, de-duplicated codes of the effective set"""
        permissions = await self.resolve_effective_permissions(user_id)
        return sorted({permission.permission_code for permission in permissions})

    async def _clear_cache(self, clear: Callable[[], Awaitable[Any]]) -> None:
        if self.session is not None and self.session.in_transaction():
            call_after_commit(self.session, clear)
        else:
            await clear()

    async def invalidate_user(self, user_id: str) -> None:
        """Forget the resolved set of one principal"""
        self._resolved.pop(user_id, None)
        if self.cache:
            cache = self.cache
            await self._clear_cache(lambda: cache.delete(self._cache_key(user_id)))

    async def invalidate_all(self) -> None:
        """Forget every resolved set (role or permission changed)"""
        self._resolved.clear()
        if self.cache:
            cache = self.cache
            await self._clear_cache(lambda: cache.delete_pattern(f"{CACHE_KEY_PREFIX}:*"))
