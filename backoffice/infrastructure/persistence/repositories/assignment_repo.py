"""
Permission catalog: role-permission grants and principal-role assignments.

Role-permission pairs and active principal-role pairs are sets. Assigning an
existing pair is a no-op, so the assign methods report how many pairs were
actually added rather than failing.
"""

from typing import Any

from sqlalchemy import Insert, delete, exists, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.infrastructure.persistence.models.permission import (
    Permission,
    RolePermission,
    UserRole,
)
from backoffice.infrastructure.persistence.models.role import Role
from backoffice.shared.utils.datetime import utc_now
from backoffice.shared.utils.generators import generate_cuid


class AssignmentRepository:
    """Reads and writes the role-permission and user-role link tables."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _insert_ignoring_conflicts(self, model: type[Any], rows: list[dict[str, Any]]) -> Insert:
        """INSERT ... ON CONFLICT DO NOTHING for the bound dialect"""
        dialect_name = self.db.get_bind().dialect.name
        if dialect_name == "postgresql":
            return postgresql.insert(model).values(rows).on_conflict_do_nothing()
        if dialect_name == "sqlite":
            return sqlite.insert(model).values(rows).on_conflict_do_nothing()
        raise NotImplementedError(f"Unsupported database dialect: {dialect_name}")

    # Reads used by the permission resolution engine

    async def get_active_role_ids_for_user(self, user_id: str) -> list[str]:
        """Role ids of active assignments to roles that are not deleted"""
        result = await self.db.execute(
            select(UserRole.role_id)
            .join(Role, Role.id == UserRole.role_id)
            .where(
                UserRole.user_id == user_id,
                UserRole.is_deleted.is_(False),
                Role.is_deleted.is_(False),
            )
            .order_by(UserRole.assigned_at, UserRole.role_id)
        )
        return list(result.scalars().all())

    async def get_permissions_for_role(self, role_id: str) -> list[Permission]:
        """Non-deleted permissions granted to a role"""
        result = await self.db.execute(
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.role_id == role_id, Permission.is_deleted.is_(False))
            .order_by(Permission.permission_code)
        )
        return list(result.scalars().all())

    # Role-permission grants

    async def assign_permissions(
        self, role_id: str, permission_ids: list[str], assigned_by: str | None = None
    ) -> int:
        """
        Grant permissions to a role.

        Returns:
            Number of grants newly created; already granted pairs are skipped
        """
        unique_ids = list(dict.fromkeys(permission_ids))
        if not unique_ids:
            return 0

        now = utc_now()
        rows = [
            {
                "id": generate_cuid(),
                "role_id": role_id,
                "permission_id": permission_id,
                "assigned_by": assigned_by,
                "assigned_at": now,
            }
            for permission_id in unique_ids
        ]
        result: Any = await self.db.execute(self._insert_ignoring_conflicts(RolePermission, rows))
        return result.rowcount

    async def remove_permission(self, role_id: str, permission_id: str) -> bool:
        result: Any = await self.db.execute(
            delete(RolePermission).where(
                RolePermission.role_id == role_id,
                RolePermission.permission_id == permission_id,
            )
        )
        return result.rowcount > 0

    async def is_permission_in_use(self, permission_id: str) -> bool:
        """True while any role still holds the permission"""
        result = await self.db.execute(
            select(exists().where(RolePermission.permission_id == permission_id))
        )
        return bool(result.scalar())

    # Principal-role assignments

    async def is_role_in_use(self, role_id: str) -> bool:
        """True while any active assignment references the role"""
        result = await self.db.execute(
            select(
                exists().where(UserRole.role_id == role_id, UserRole.is_deleted.is_(False))
            )
        )
        return bool(result.scalar())

    async def assign_roles(
        self, user_id: str, role_ids: list[str], assigned_by: str | None = None
    ) -> int:
        """
        Assign roles to a user.

        Returns:
            Number of assignments newly created; active pairs are skipped
        """
        unique_ids = list(dict.fromkeys(role_ids))
        if not unique_ids:
            return 0

        now = utc_now()
        rows = [
            {
                "id": generate_cuid(),
                "user_id": user_id,
                "role_id": role_id,
                "assigned_by": assigned_by,
                "assigned_at": now,
                "is_deleted": False,
            }
            for role_id in unique_ids
        ]
        result: Any = await self.db.execute(self._insert_ignoring_conflicts(UserRole, rows))
        return result.rowcount

    async def remove_role(self, user_id: str, role_id: str, deleted_by: str | None = None) -> bool:
        """Soft delete the active assignment, if any"""
        result: Any = await self.db.execute(
            update(UserRole)
            .where(
                UserRole.user_id == user_id,
                UserRole.role_id == role_id,
                UserRole.is_deleted.is_(False),
            )
            .values(is_deleted=True, deleted_at=utc_now(), deleted_by=deleted_by)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def get_user_roles(self, user_id: str) -> list[tuple[UserRole, Role]]:
        """Active assignments of the user together with their roles"""
        result = await self.db.execute(
            select(UserRole, Role)
            .join(Role, Role.id == UserRole.role_id)
            .where(
                UserRole.user_id == user_id,
                UserRole.is_deleted.is_(False),
                Role.is_deleted.is_(False),
            )
            .order_by(Role.role_name)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def get_user_ids_for_role(self, role_id: str) -> list[str]:
        """Users actively holding a role"""
        result = await self.db.execute(
            select(UserRole.user_id).where(
                UserRole.role_id == role_id, UserRole.is_deleted.is_(False)
            )
        )
        return list(result.scalars().all())

