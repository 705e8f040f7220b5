"""Permission catalog maintenance."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from backoffice.application.services.audit_service import AuditService, snapshot
from backoffice.application.services.authorization_service import AuthorizationService
from backoffice.application.services.concurrency import VersionedMutator
from backoffice.domain.enums import PermissionType
from backoffice.domain.exceptions import DuplicateError, InUseError, ValidationException
from backoffice.domain.value_objects import PermissionCode
from backoffice.infrastructure.persistence.models.permission import Permission
from backoffice.infrastructure.persistence.repositories.assignment_repo import (
    AssignmentRepository,
)
from backoffice.infrastructure.persistence.repositories.permission_repo import (
    PermissionRepository,
)
from backoffice.shared.context import get_current_actor_id
from backoffice.shared.enums import OperationType, TargetType

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class PermissionService:
    def __init__(
        self,
        db: AsyncSession,
        audit: AuditService,
        authorization: AuthorizationService,
    ):
        self.db = db
        self.permissions = PermissionRepository(db)
        self.assignments = AssignmentRepository(db)
        self.mutator = VersionedMutator(self.permissions)
        self.audit = audit
        self.authorization = authorization

    @staticmethod
    def _validate_type(permission_type: str, route_path: str | None) -> None:
        if permission_type not in PermissionType.values():
            raise ValidationException(
                f"Invalid permission type '{permission_type}'. "
                f"Must be one of: {', '.join(PermissionType.values())}",
                field="permission_type",
            )
        if permission_type == PermissionType.ROUTE.value and not route_path:
            raise ValidationException(
                "Route permissions require a route path", field="route_path"
            )

    async def create_permission(
        self,
        permission_code: str,
        name: str,
        permission_type: str = PermissionType.FUNCTION.value,
        route_path: str | None = None,
        description: str | None = None,
    ) -> Permission:
        try:
            code = PermissionCode(permission_code)
        except ValueError as e:
            raise ValidationException(str(e), field="permission_code") from e
        self._validate_type(permission_type, route_path)

        if await self.permissions.get_by_code(code.value):
            raise DuplicateError("Permission", "permission_code", code.value)

        actor_id = get_current_actor_id()
        permission = await self.permissions.create(
            Permission(
                permission_code=code.value,
                name=name,
                permission_type=permission_type,
                route_path=route_path,
                description=description,
                created_by=actor_id,
                updated_by=actor_id,
            )
        )
        await self.audit.record_change(
            OperationType.CREATE,
            TargetType.PERMISSION,
            permission.id,
            after_state=snapshot(permission),
        )
        return permission

    async def get_permission(self, permission_id: str) -> Permission:
        return await self.mutator.get_active_or_raise(permission_id)

    async def list_permissions(
        self, keyword: str | None = None, permission_type: str | None = None
    ) -> list[Permission]:
        return await self.permissions.search(keyword, permission_type)

    async def update_permission(
        self,
        permission_id: str,
        expected_version: int,
        name: str | None = None,
        description: str | None = None,
        route_path: str | None = None,
    ) -> Permission:
        """The code and type are fixed once created; the rest is editable"""
        current = await self.mutator.get_active_or_raise(permission_id)
        values: dict[str, Any] = {}
        if name is not None:
            values["name"] = name
        if description is not None:
            values["description"] = description
        if route_path is not None:
            self._validate_type(current.permission_type, route_path)
            values["route_path"] = route_path

        before = snapshot(current)
        permission = await self.mutator.update(permission_id, expected_version, values)
        await self.authorization.invalidate_all()
        await self.audit.record_change(
            OperationType.UPDATE,
            TargetType.PERMISSION,
            permission_id,
            before,
            snapshot(permission),
        )
        return permission

    async def delete_permission(self, permission_id: str, expected_version: int) -> None:
        """
        Soft delete a permission.

        Raises:
            InUseError: A role still holds the permission
        """
        current = await self.mutator.get_active_or_raise(permission_id)
        if await self.assignments.is_permission_in_use(permission_id):
            raise InUseError("Permission", permission_id, "roles")

        before = snapshot(current)
        await self.mutator.delete(permission_id, expected_version)
        await self.authorization.invalidate_all()
        await self.audit.record_change(
            OperationType.DELETE, TargetType.PERMISSION, permission_id, before
        )
