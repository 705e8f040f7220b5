"""Role management and role-permission grants."""

from __future__ import annotations

from typing import TYPE_CHECKING

from backoffice.application.services.audit_service import AuditService, snapshot
from backoffice.application.services.authorization_service import AuthorizationService
from backoffice.application.services.concurrency import VersionedMutator
from backoffice.domain.exceptions import (
    DuplicateError,
    InUseError,
    NotFoundError,
    ValidationException,
)
from backoffice.infrastructure.persistence.models.permission import Permission
from backoffice.infrastructure.persistence.models.role import Role
from backoffice.infrastructure.persistence.repositories.assignment_repo import (
    AssignmentRepository,
)
from backoffice.infrastructure.persistence.repositories.permission_repo import (
    PermissionRepository,
)
from backoffice.infrastructure.persistence.repositories.role_repo import RoleRepository
from backoffice.shared.context import get_current_actor_id
from backoffice.shared.enums import OperationType, TargetType
from backoffice.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


class RoleService:
    def __init__(
        self,
        db: AsyncSession,
        audit: AuditService,
        authorization: AuthorizationService,
    ):
        self.db = db
        self.roles = RoleRepository(db)
        self.permissions = PermissionRepository(db)
        self.assignments = AssignmentRepository(db)
        self.mutator = VersionedMutator(self.roles)
        self.audit = audit
        self.authorization = authorization

    async def create_role(self, role_name: str, description: str | None = None) -> Role:
        role_name = role_name.strip()
        if not role_name:
            raise ValidationException("Role name must not be empty", field="role_name")
        if await self.roles.get_by_name(role_name):
            raise DuplicateError("Role", "role_name", role_name)

        actor_id = get_current_actor_id()
        role = await self.roles.create(
            Role(
                role_name=role_name,
                description=description,
                created_by=actor_id,
                updated_by=actor_id,
            )
        )
        await self.audit.record_change(
            OperationType.CREATE, TargetType.ROLE, role.id, after_state=snapshot(role)
        )
        return role

    async def get_role(self, role_id: str) -> Role:
        return await self.mutator.get_active_or_raise(role_id)

    async def list_roles(self) -> list[Role]:
        return await self.roles.list_all()

    async def get_role_detail(self, role_id: str) -> tuple[Role, list[Permission]]:
        """The role with its granted (non-deleted) permissions"""
        role = await self.mutator.get_active_or_raise(role_id)
        return role, await self.assignments.get_permissions_for_role(role_id)

    async def update_role(
        self,
        role_id: str,
        expected_version: int,
        role_name: str | None = None,
        description: str | None = None,
    ) -> Role:
        current = await self.mutator.get_active_or_raise(role_id)
        values: dict[str, str | None] = {}
        if role_name is not None and role_name.strip() != current.role_name:
            role_name = role_name.strip()
            if not role_name:
                raise ValidationException("Role name must not be empty", field="role_name")
            if await self.roles.get_by_name(role_name):
                raise DuplicateError("Role", "role_name", role_name)
            values["role_name"] = role_name
        if description is not None:
            values["description"] = description

        before = snapshot(current)
        role = await self.mutator.update(role_id, expected_version, values)
        await self.audit.record_change(
            OperationType.UPDATE, TargetType.ROLE, role_id, before, snapshot(role)
        )
        return role

    async def delete_role(self, role_id: str, expected_version: int) -> None:
        """
        Soft delete a role.

        Raises:
            InUseError: The role is still assigned to a user; checked before
                the version
        """
        current = await self.mutator.get_active_or_raise(role_id)
        if await self.assignments.is_role_in_use(role_id):
            raise InUseError("Role", role_id, "users")

        before = snapshot(current)
        await self.mutator.delete(role_id, expected_version)
        await self.authorization.invalidate_all()
        await self.audit.record_change(OperationType.DELETE, TargetType.ROLE, role_id, before)

    async def assign_permissions(self, role_id: str, permission_ids: list[str]) -> int:
        """
        Grant permissions to a role. Already granted pairs are skipped.

        Returns:
            Number of grants newly created
        """
        await self.mutator.get_active_or_raise(role_id)
        requested = list(dict.fromkeys(permission_ids))
        found = {p.id for p in await self.permissions.get_active_by_ids(requested)}
        for permission_id in requested:
            if permission_id not in found:
                raise NotFoundError("Permission", permission_id)

        added = await self.assignments.assign_permissions(
            role_id, requested, assigned_by=get_current_actor_id()
        )
        if added:
            await self.authorization.invalidate_all()
            await self.audit.record_change(
                OperationType.CREATE,
                TargetType.ROLE_PERMISSION,
                role_id,
                after_state={"role_id": role_id, "permission_ids": requested},
                additional_info={"added": added},
            )
        logger.info("Granted %d of %d permissions to role %s", added, len(requested), role_id)
        return added

    async def remove_permission(self, role_id: str, permission_id: str) -> None:
        await self.mutator.get_active_or_raise(role_id)
        if not await self.assignments.remove_permission(role_id, permission_id):
            raise NotFoundError("RolePermission", f"{role_id}:{permission_id}")

        await self.authorization.invalidate_all()
        await self.audit.record_change(
            OperationType.DELETE,
            TargetType.ROLE_PERMISSION,
            role_id,
            before_state={"role_id": role_id, "permission_id": permission_id},
        )
