"""
Audit trail recorder.

Writes one immutable entry per privileged state change, with JSON snapshots
of the aggregate before and after. Recording is best-effort: a failure is
logged and never propagates into, or rolls back, the business operation
that triggered it.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import inspect

from backoffice.infrastructure.config.settings import get_settings
from backoffice.infrastructure.persistence.models.audit_log import AuditLog
from backoffice.infrastructure.persistence.repositories.audit_log_repo import (
    AuditLogFilter,
    AuditLogRepository,
)
from backoffice.shared.context import get_actor_context
from backoffice.shared.enums import OperationType, TargetType
from backoffice.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from backoffice.application.interfaces.repositories import AuditSink

logger = get_logger(__name__)

REDACTED = "[REDACTED]"


def _json_safe(value: Any) -> Any:
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [_json_safe(item) for item in value]
    return value


def snapshot(entity: Any) -> dict[str, Any]:
    """Column values of an ORM instance as a JSON-serialisable dict"""
    mapper = inspect(entity).mapper
    return {
        attr.key: _json_safe(getattr(entity, attr.key)) for attr in mapper.column_attrs
    }


def redact(state: dict[str, Any] | None, fields: Iterable[str]) -> dict[str, Any] | None:
    """Replace sensitive values (matched case-insensitively by key)"""
    if state is None:
        return None
    sensitive = {name.lower() for name in fields}
    return {
        key: REDACTED if key.lower() in sensitive else _json_safe(value)
        for key, value in state.items()
    }


class AuditService:
    """Records audit entries and exposes the read-only trail."""

    def __init__(self, db: AsyncSession, sink: AuditSink | None = None):
        self.db = db
        self.repository = AuditLogRepository(db)
        self.sink: AuditSink = sink or self.repository
        self.redacted_fields = get_settings().redacted_field_names

    async def record(
        self,
        operator_id: str | None,
        operator_name: str,
        operation_type: OperationType | str,
        target_type: TargetType | str,
        target_id: str | None,
        before_state: dict[str, Any] | None,
        after_state: dict[str, Any] | None,
        trace_id: str | None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        additional_info: dict[str, Any] | None = None,
    ) -> AuditLog | None:
        """
        Append one audit entry.

        The insert runs in a savepoint so a failed write leaves the caller's
        transaction usable.

        Returns:
            The stored entry, or None if it could not be written
        """
        try:
            entry = AuditLog(
                operator_id=operator_id,
                operator_name=operator_name,
                operation_type=OperationType(operation_type).value,
                target_type=TargetType(target_type).value,
                target_id=target_id,
                before_state=redact(before_state, self.redacted_fields),
                after_state=redact(after_state, self.redacted_fields),
                ip_address=ip_address,
                user_agent=user_agent,
                trace_id=trace_id,
                additional_info=_json_safe(additional_info) if additional_info else None,
            )
            async with self.db.begin_nested():
                await self.sink.insert(entry)
        except Exception as e:
            logger.error(
                "Failed to record audit entry %s %s %s (trace %s): %s",
                operation_type,
                target_type,
                target_id,
                trace_id,
                e,
                exc_info=True,
            )
            return None

        logger.debug(
            "Audit %s %s %s by %s", entry.operation_type, entry.target_type, target_id, operator_name
        )
        return entry

    async def record_change(
        self,
        operation_type: OperationType,
        target_type: TargetType,
        target_id: str | None,
        before_state: dict[str, Any] | None = None,
        after_state: dict[str, Any] | None = None,
        additional_info: dict[str, Any] | None = None,
    ) -> AuditLog | None:
        """record() with operator and transport details taken from the request context"""
        actor = get_actor_context()
        return await self.record(
            operator_id=actor.user_id,
            operator_name=actor.operator_name,
            operation_type=operation_type,
            target_type=target_type,
            target_id=target_id,
            before_state=before_state,
            after_state=after_state,
            trace_id=actor.trace_id,
            ip_address=actor.ip_address,
            user_agent=actor.user_agent,
            additional_info=additional_info,
        )

    # Query projection

    async def get_by_id(self, log_id: str) -> AuditLog | None:
        return await self.repository.get_by_id(log_id)

    async def get_by_trace_id(self, trace_id: str) -> list[AuditLog]:
        """Every entry written while serving one request"""
        return await self.repository.get_by_trace_id(trace_id)

    async def list_logs(
        self, filters: AuditLogFilter, page: int = 1, page_size: int = 20
    ) -> tuple[list[AuditLog], int]:
        return await self.repository.list_logs(
            filters, skip=(page - 1) * page_size, limit=page_size
        )
