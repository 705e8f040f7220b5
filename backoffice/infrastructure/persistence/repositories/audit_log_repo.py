from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.infrastructure.persistence.models.audit_log import AuditLog, PermissionFailureLog


@dataclass(frozen=True)
class AuditLogFilter:
    """Optional criteria for audit trail queries; unset fields do not filter."""

    operator_id: str | None = None
    operation_type: str | None = None
    target_type: str | None = None
    target_id: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None


class AuditLogRepository:
    """Append-only store for audit entries. There is no update or delete."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(self, entry: AuditLog) -> AuditLog:
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def get_by_id(self, id: str) -> AuditLog | None:
        result = await self.db.execute(select(AuditLog).where(AuditLog.id == id))
        return result.scalar_one_or_none()

    async def get_by_trace_id(self, trace_id: str) -> list[AuditLog]:
        result = await self.db.execute(
            select(AuditLog)
            .where(AuditLog.trace_id == trace_id)
            .order_by(AuditLog.operation_time, AuditLog.id)
        )
        return list(result.scalars().all())

    async def list_logs(
        self, filters: AuditLogFilter, skip: int = 0, limit: int = 20
    ) -> tuple[list[AuditLog], int]:
        """Newest first, with the total count of matching entries"""
        conditions = []
        if filters.operator_id:
            conditions.append(AuditLog.operator_id == filters.operator_id)
        if filters.operation_type:
            conditions.append(AuditLog.operation_type == filters.operation_type)
        if filters.target_type:
            conditions.append(AuditLog.target_type == filters.target_type)
        if filters.target_id:
            conditions.append(AuditLog.target_id == filters.target_id)
        if filters.start_time:
            conditions.append(AuditLog.operation_time >= filters.start_time)
        if filters.end_time:
            conditions.append(AuditLog.operation_time <= filters.end_time)

        total = (
            await self.db.execute(select(func.count()).select_from(AuditLog).where(*conditions))
        ).scalar_one()
        result = await self.db.execute(
            select(AuditLog)
            .where(*conditions)
            .order_by(AuditLog.operation_time.desc(), AuditLog.id)
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total


class PermissionFailureLogRepository:
    """Append-only store for denied access attempts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(self, entry: PermissionFailureLog) -> PermissionFailureLog:
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def list_failures(
        self, user_id: str | None = None, skip: int = 0, limit: int = 20
    ) -> tuple[list[PermissionFailureLog], int]:
        conditions = []
        if user_id:
            conditions.append(PermissionFailureLog.user_id == user_id)

        total = (
            await self.db.execute(
                select(func.count()).select_from(PermissionFailureLog).where(*conditions)
            )
        ).scalar_one()
        result = await self.db.execute(
            select(PermissionFailureLog)
            .where(*conditions)
            .order_by(PermissionFailureLog.attempted_at.desc(), PermissionFailureLog.id)
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total
