"""Back-office account (principal) management."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from backoffice.application.services.audit_service import AuditService, snapshot
from backoffice.application.services.authorization_service import AuthorizationService
from backoffice.application.services.concurrency import VersionedMutator
from backoffice.domain.exceptions import (
    DuplicateError,
    PolicyViolationError,
    ValidationException,
)
from backoffice.infrastructure.persistence.models.role import Role
from backoffice.infrastructure.persistence.models.user import User
from backoffice.infrastructure.persistence.repositories.assignment_repo import (
    AssignmentRepository,
)
from backoffice.infrastructure.persistence.repositories.user_repo import UserRepository
from backoffice.infrastructure.security.password import get_password_hash, verify_password
from backoffice.shared.context import get_current_actor_id
from backoffice.shared.enums import OperationType, TargetType
from backoffice.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6


@dataclass
class AccountProfile:
    user: User
    roles: list[Role]
    permission_codes: list[str]


class AccountService:
    def __init__(
        self,
        db: AsyncSession,
        audit: AuditService,
        authorization: AuthorizationService,
    ):
        self.db = db
        self.users = UserRepository(db)
        self.assignments = AssignmentRepository(db)
        self.mutator = VersionedMutator(self.users)
        self.audit = audit
        self.authorization = authorization

    @staticmethod
    def _normalize_account(account: str) -> str:
        normalized = account.strip().lower()
        if not normalized:
            raise ValidationException("Account must not be empty", field="account")
        return normalized

    @staticmethod
    def _validate_password(password: str) -> None:
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationException(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters", field="password"
            )

    async def create_account(self, account: str, display_name: str, password: str) -> User:
        """Create a principal; the account is stored lower-cased"""
        account = self._normalize_account(account)
        self._validate_password(password)

        if await self.users.account_exists(account):
            raise DuplicateError("User", "account", account)

        actor_id = get_current_actor_id()
        user = await self.users.create(
            User(
                account=account,
                display_name=display_name,
                password_hash=get_password_hash(password),
                created_by=actor_id,
                updated_by=actor_id,
            )
        )
        await self.audit.record_change(
            OperationType.CREATE, TargetType.USER, user.id, after_state=snapshot(user)
        )
        logger.info("Created account %s (%s)", user.account, user.id)
        return user

    async def get_account(self, user_id: str) -> User:
        return await self.mutator.get_active_or_raise(user_id)

    async def search_accounts(
        self, keyword: str | None = None, page: int = 1, page_size: int = 20
    ) -> tuple[list[User], int]:
        return await self.users.search(keyword, skip=(page - 1) * page_size, limit=page_size)

    async def update_account(self, user_id: str, expected_version: int, display_name: str) -> User:
        before = snapshot(await self.mutator.get_active_or_raise(user_id))
        user = await self.mutator.update(user_id, expected_version, {"display_name": display_name})
        await self.audit.record_change(
            OperationType.UPDATE, TargetType.USER, user_id, before, snapshot(user)
        )
        return user

    async def change_password(
        self, user_id: str, expected_version: int, old_password: str, new_password: str
    ) -> User:
        current = await self.mutator.get_active_or_raise(user_id)
        if not verify_password(old_password, current.password_hash):
            raise ValidationException("Old password is incorrect", field="old_password")
        if old_password == new_password:
            raise ValidationException(
                "New password must differ from the old password", field="new_password"
            )
        self._validate_password(new_password)

        before = snapshot(current)
        user = await self.mutator.update(
            user_id, expected_version, {"password_hash": get_password_hash(new_password)}
        )
        await self.audit.record_change(
            OperationType.UPDATE,
            TargetType.USER,
            user_id,
            before,
            snapshot(user),
            additional_info={"action": "change_password"},
        )
        return user

    async def delete_account(self, user_id: str, expected_version: int) -> None:
        """
        Soft delete a principal.

        Raises:
            PolicyViolationError: Deleting oneself or the last active account,
                whatever the version
        """
        if user_id == get_current_actor_id():
            raise PolicyViolationError("You cannot delete your own account", "SELF_DELETE")

        current = await self.mutator.get_active_or_raise(user_id)
        if await self.users.count_active() <= 1:
            raise PolicyViolationError(
                "The last active account cannot be deleted", "LAST_ACCOUNT_DELETE"
            )

        before = snapshot(current)
        await self.mutator.delete(user_id, expected_version)
        await self.authorization.invalidate_user(user_id)
        await self.audit.record_change(OperationType.DELETE, TargetType.USER, user_id, before)
        logger.info("Deleted account %s", user_id)

    async def get_profile(self, user_id: str) -> AccountProfile:
        """The principal with its active roles and effective permission codes"""
        user = await self.mutator.get_active_or_raise(user_id)
        roles = [role for _, role in await self.assignments.get_user_roles(user_id)]
        codes = await self.authorization.get_permission_codes(user_id)
        return AccountProfile(user=user, roles=roles, permission_codes=codes)
