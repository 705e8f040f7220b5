"""
Access-denial recorder.

Every negative authorization answer on a guarded operation leaves one
entry. Like the audit trail this is best-effort: a failed write is logged
and reported as False; it never raises and never changes the decision.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from backoffice.infrastructure.persistence.models.audit_log import PermissionFailureLog
from backoffice.infrastructure.persistence.repositories.audit_log_repo import (
    PermissionFailureLogRepository,
)
from backoffice.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from backoffice.application.interfaces.repositories import DenialSink

logger = get_logger(__name__)


def missing_permission_reason(permission_code: str) -> str:
    return f"missing permission: {permission_code}"


class AccessDenialService:
    def __init__(self, db: AsyncSession, sink: DenialSink | None = None):
        self.db = db
        self.repository = PermissionFailureLogRepository(db)
        self.sink: DenialSink = sink or self.repository

    async def record(
        self,
        user_id: str | None,
        username: str | None,
        attempted_resource: str,
        reason: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
        trace_id: str | None = None,
    ) -> bool:
        """
        Append one denied-access entry.

        Returns:
            True if the entry was stored, False otherwise
        """
        entry = PermissionFailureLog(
            user_id=user_id,
            username=username,
            attempted_resource=attempted_resource,
            failure_reason=reason,
            ip_address=ip_address,
            user_agent=user_agent,
            trace_id=trace_id,
        )
        try:
            async with self.db.begin_nested():
                await self.sink.insert(entry)
        except Exception as e:
            logger.error(
                "Failed to record access denial for user %s on %s: %s",
                user_id,
                attempted_resource,
                e,
                exc_info=True,
            )
            return False

        logger.warning(
            "Access denied: user=%s resource=%s reason=%s", user_id, attempted_resource, reason
        )
        return True

    async def list_failures(
        self, user_id: str | None = None, page: int = 1, page_size: int = 20
    ) -> tuple[list[PermissionFailureLog], int]:
        return await self.repository.list_failures(
            user_id=user_id, skip=(page - 1) * page_size, limit=page_size
        )
