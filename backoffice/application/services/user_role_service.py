"""Principal-role assignments."""

from __future__ import annotations

from typing import TYPE_CHECKING

from backoffice.application.services.audit_service import AuditService
from backoffice.application.services.authorization_service import AuthorizationService
from backoffice.domain.exceptions import NotFoundError
from backoffice.infrastructure.persistence.models.permission import UserRole
from backoffice.infrastructure.persistence.models.role import Role
from backoffice.infrastructure.persistence.repositories.assignment_repo import (
    AssignmentRepository,
)
from backoffice.infrastructure.persistence.repositories.role_repo import RoleRepository
from backoffice.infrastructure.persistence.repositories.user_repo import UserRepository
from backoffice.shared.context import get_current_actor_id
from backoffice.shared.enums import OperationType, TargetType
from backoffice.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


class UserRoleService:
    def __init__(
        self,
        db: AsyncSession,
        audit: AuditService,
        authorization: AuthorizationService,
    ):
        self.db = db
        self.users = UserRepository(db)
        self.roles = RoleRepository(db)
        self.assignments = AssignmentRepository(db)
        self.audit = audit
        self.authorization = authorization

    async def _require_user(self, user_id: str) -> None:
        if not await self.users.exists_active(user_id):
            raise NotFoundError("User", user_id)

    async def assign_roles(self, user_id: str, role_ids: list[str]) -> int:
        """
        Assign roles to a user. Active pairs are skipped.

        Returns:
            Number of assignments newly created
        """
        await self._require_user(user_id)
        requested = list(dict.fromkeys(role_ids))
        found = {role.id for role in await self.roles.get_active_by_ids(requested)}
        for role_id in requested:
            if role_id not in found:
                raise NotFoundError("Role", role_id)

        added = await self.assignments.assign_roles(
            user_id, requested, assigned_by=get_current_actor_id()
        )
        if added:
            await self.authorization.invalidate_user(user_id)
            await self.audit.record_change(
                OperationType.CREATE,
                TargetType.USER_ROLE,
                user_id,
                after_state={"user_id": user_id, "role_ids": requested},
                additional_info={"added": added},
            )
        logger.info("Assigned %d of %d roles to user %s", added, len(requested), user_id)
        return added

    async def remove_role(self, user_id: str, role_id: str) -> None:
        """Soft delete the active assignment; the pair may be re-assigned later"""
        await self._require_user(user_id)
        removed = await self.assignments.remove_role(
            user_id, role_id, deleted_by=get_current_actor_id()
        )
        if not removed:
            raise NotFoundError("UserRole", f"{user_id}:{role_id}")

        await self.authorization.invalidate_user(user_id)
        await self.audit.record_change(
            OperationType.DELETE,
            TargetType.USER_ROLE,
            user_id,
            before_state={"user_id": user_id, "role_id": role_id},
        )

    async def list_user_roles(self, user_id: str) -> list[tuple[UserRole, Role]]:
        await self._require_user(user_id)
        return await self.assignments.get_user_roles(user_id)
