"""
Generic versioned aggregate store.

Every mutable aggregate (users, roles, permissions, customers, service
orders) is read, created, updated and soft-deleted through this one
repository type. Updates and deletes are compare-and-set on the version
column; the caller learns from the boolean result whether its expected
version was still current.
"""

from typing import Any, ClassVar, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.domain.exceptions import DuplicateError
from backoffice.infrastructure.persistence.models.mixins import VersionedAggregateMixin
from backoffice.infrastructure.persistence.repositories.base import BaseRepository
from backoffice.shared.utils.datetime import utc_now

AggregateType = TypeVar("AggregateType", bound=VersionedAggregateMixin)


class VersionedRepository(BaseRepository[AggregateType]):
    """
    Repository for soft-deletable, optimistically locked aggregates.

    Subclasses set ``resource_type`` (used in error messages) and
    ``unique_field`` (the column guarded by a partial unique index, used to
    describe a DuplicateError raised by the store).
    """

    resource_type: ClassVar[str] = "Resource"
    unique_field: ClassVar[str | None] = None

    def __init__(self, db: AsyncSession, model: type[AggregateType]):
        super().__init__(db, model)

    def _active(self):
        model: Any = self.model
        return model.is_deleted.is_(False)

    async def get_active(self, id: str) -> AggregateType | None:
        """Get a non-deleted record by ID"""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == id, self._active()))
        return result.scalar_one_or_none()

    async def exists_active(self, id: str) -> bool:
        model: Any = self.model
        result = await self.db.execute(
            select(func.count()).select_from(self.model).where(model.id == id, self._active())
        )
        return result.scalar_one() > 0

    async def count_active(self) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(self.model).where(self._active())
        )
        return result.scalar_one()

    async def get_active_by_ids(self, ids: list[str]) -> list[AggregateType]:
        if not ids:
            return []
        model: Any = self.model
        result = await self.db.execute(
            select(self.model).where(model.id.in_(ids), self._active())
        )
        return list(result.scalars().all())

    async def list_active(self, skip: int = 0, limit: int = 100) -> list[AggregateType]:
        model: Any = self.model
        result = await self.db.execute(
            select(self.model)
            .where(self._active())
            .order_by(model.created_at.desc(), model.id)
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def create(self, obj: AggregateType) -> AggregateType:
        """
        Insert a new aggregate at version 1.

        A unique index violation from the store surfaces as DuplicateError
        even when the caller's pre-check passed (concurrent insert). The
        session is left needing a rollback, which the request transaction does.
        """
        try:
            return await super().create(obj)
        except IntegrityError as e:
            field = self.unique_field or "id"
            raise DuplicateError(self.resource_type, field, str(getattr(obj, field, ""))) from e

    async def get_version(self, id: str) -> int | None:
        """Current stored version, soft-deleted rows included"""
        model: Any = self.model
        result = await self.db.execute(select(model.version).where(model.id == id))
        return result.scalar_one_or_none()

    async def conditional_update(
        self,
        id: str,
        expected_version: int,
        values: dict[str, Any],
        updated_by: str | None = None,
    ) -> bool:
        """
        Apply ``values`` and bump the version iff the row is active and still
        at ``expected_version``.

        Returns:
            True if exactly one row was written, False on a version mismatch

        Raises:
            DuplicateError: The new values collide with another active row
        """
        model: Any = self.model
        stmt = (
            update(self.model)
            .where(model.id == id, model.version == expected_version, self._active())
            .values(**values, version=model.version + 1, updated_by=updated_by)
            .execution_options(synchronize_session=False)
        )
        try:
            result: Any = await self.db.execute(stmt)
        except IntegrityError as e:
            field = self.unique_field or "id"
            raise DuplicateError(self.resource_type, field, str(values.get(field, ""))) from e
        return result.rowcount == 1

    async def conditional_soft_delete(
        self, id: str, expected_version: int, deleted_by: str | None = None
    ) -> bool:
        """Soft delete iff the row is active and still at ``expected_version``."""
        return await self.conditional_update(
            id,
            expected_version,
            {"is_deleted": True, "deleted_at": utc_now(), "deleted_by": deleted_by},
            updated_by=deleted_by,
        )

    async def reload(self, id: str) -> AggregateType | None:
        """Re-read a row, overwriting any stale identity-map copy"""
        model: Any = self.model
        result = await self.db.execute(
            select(self.model).where(model.id == id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
