"""
Store interfaces (ports) consumed by the application services.

These protocols define the contracts the control plane needs from
persistence. The SQLAlchemy repositories satisfy them structurally; tests
substitute mocks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, TypeVar

if TYPE_CHECKING:
    from backoffice.infrastructure.persistence.models import (
        AuditLog,
        Permission,
        PermissionFailureLog,
    )

T = TypeVar("T")


class VersionedStore(Protocol[T]):
    """Protocol for a soft-deletable, optimistically locked aggregate store"""

    resource_type: str

    async def get_active(self, id: str) -> T | None: ...

    async def exists_active(self, id: str) -> bool: ...

    async def count_active(self) -> int: ...

    async def create(self, obj: T) -> T:
        """Insert at version 1; raises DuplicateError on a unique violation"""
        ...

    async def get_version(self, id: str) -> int | None: ...

    async def conditional_update(
        self,
        id: str,
        expected_version: int,
        values: dict[str, Any],
        updated_by: str | None = None,
    ) -> bool:
        """Write iff active and at expected_version; False on mismatch"""
        ...

    async def conditional_soft_delete(
        self, id: str, expected_version: int, deleted_by: str | None = None
    ) -> bool: ...

    async def reload(self, id: str) -> T | None: ...


class AssignmentStore(Protocol):
    """Protocol for the permission catalog (role grants and user roles)"""

    async def get_active_role_ids_for_user(self, user_id: str) -> list[str]: ...

    async def get_permissions_for_role(self, role_id: str) -> list[Permission]: ...

    async def assign_permissions(
        self, role_id: str, permission_ids: list[str], assigned_by: str | None = None
    ) -> int: ...

    async def remove_permission(self, role_id: str, permission_id: str) -> bool: ...

    async def is_permission_in_use(self, permission_id: str) -> bool: ...

    async def is_role_in_use(self, role_id: str) -> bool: ...

    async def assign_roles(
        self, user_id: str, role_ids: list[str], assigned_by: str | None = None
    ) -> int: ...

    async def remove_role(
        self, user_id: str, role_id: str, deleted_by: str | None = None
    ) -> bool: ...


class AuditSink(Protocol):
    """Append-only audit entry store"""

    async def insert(self, entry: AuditLog) -> AuditLog: ...


class DenialSink(Protocol):
    """Append-only denied-access store"""

    async def insert(self, entry: PermissionFailureLog) -> PermissionFailureLog: ...
