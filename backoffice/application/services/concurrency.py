"""
Optimistic concurrency control.

Every mutation of a versioned aggregate names the version the caller last
read. The write is a single conditional statement; if another writer got
there first nothing changes and the caller gets ConflictError.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from backoffice.domain.exceptions import ConflictError, NotFoundError
from backoffice.shared.context import get_current_actor_id
from backoffice.shared.telemetry.logging import get_logger
from backoffice.shared.telemetry.tracing import add_span_attributes, traced

if TYPE_CHECKING:
    from backoffice.application.interfaces.repositories import VersionedStore

logger = get_logger(__name__)

T = TypeVar("T")

Mutation = Mapping[str, Any] | Callable[[T], Mapping[str, Any]]


class VersionedMutator(Generic[T]):
    """Version-checked update and soft delete over any VersionedStore."""

    def __init__(self, store: VersionedStore[T]):
        self.store = store

    async def get_active_or_raise(self, id: str) -> T:
        entity = await self.store.get_active(id)
        if entity is None:
            raise NotFoundError(self.store.resource_type, id)
        return entity

    @traced("concurrency.update")
    async def update(self, id: str, expected_version: int, mutation: Mutation) -> T:
        """
        Apply ``mutation`` iff the stored version equals ``expected_version``.

        Args:
            id: Aggregate id
            expected_version: Version the caller last read
            mutation: New column values, or a callable deriving them from the
                current state

        Returns:
            The aggregate as stored after the write (version + 1)

        Raises:
            NotFoundError: No active row with this id
            ConflictError: The version moved on; nothing was written
        """
        add_span_attributes(
            resource_type=self.store.resource_type, expected_version=expected_version
        )
        current = await self.get_active_or_raise(id)
        values = dict(mutation(current) if callable(mutation) else mutation)

        written = await self.store.conditional_update(
            id, expected_version, values, updated_by=get_current_actor_id()
        )
        if not written:
            await self._raise_conflict(id, expected_version)

        updated = await self.store.reload(id)
        if updated is None:
            raise NotFoundError(self.store.resource_type, id)
        return updated

    @traced("concurrency.delete")
    async def delete(self, id: str, expected_version: int) -> None:
        """
        Soft delete iff the stored version equals ``expected_version``.

        Raises:
            NotFoundError: No active row with this id
            ConflictError: The version moved on; the row stays active
        """
        await self.get_active_or_raise(id)

        deleted = await self.store.conditional_soft_delete(
            id, expected_version, deleted_by=get_current_actor_id()
        )
        if not deleted:
            await self._raise_conflict(id, expected_version)

    async def _raise_conflict(self, id: str, expected_version: int) -> None:
        current_version = await self.store.get_version(id)
        logger.info(
            "Version conflict on %s %s: expected %s, stored %s",
            self.store.resource_type,
            id,
            expected_version,
            current_version,
        )
        raise ConflictError(self.store.resource_type, id, expected_version, current_version)
