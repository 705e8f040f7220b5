"""
SQLAlchemy mixins for common model patterns.

These mixins provide reusable column definitions so every aggregate carries
the same identity, timestamp, soft-delete, user-stamp and version columns.

Audit Levels:
    - TimestampMixin: Just timestamps (created_at, updated_at)
    - SoftDeleteMixin: Adds the soft delete flag (is_deleted, deleted_at)
    - UserAuditMixin: Adds user tracking (created_by, updated_by, deleted_by)
    - VersionedAggregateMixin: Everything above plus the optimistic lock counter
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, false
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from backoffice.shared.utils.generators import generate_cuid


class CuidMixin:
    """
    Mixin for models using CUID as primary key.

    Provides:
        - id: String primary key with automatic CUID generation
    """

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class TimestampMixin:
    """
    Mixin for timestamp tracking.

    Provides:
        - created_at: Timestamp set on creation (server-side default)
        - updated_at: Timestamp updated on modification (server-side default + onupdate)
    """

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )


class SoftDeleteMixin:
    """
    Soft delete support (tombstone pattern).

    Provides:
        - is_deleted: Flag excluded from every active query
        - deleted_at: Timestamp set on soft delete

    Usage:
        # Query active only: .where(Model.is_deleted.is_(False))
        # Rows stay addressable by id for history.
    """

    @declared_attr
    def is_deleted(cls) -> Mapped[bool]:
        return mapped_column(
            Boolean, default=False, server_default=false(), nullable=False, index=True
        )

    @declared_attr
    def deleted_at(cls) -> Mapped[datetime | None]:
        return mapped_column(DateTime(timezone=True), nullable=True)


class UserAuditMixin(TimestampMixin, SoftDeleteMixin):
    """
    User audit tracking (who did what).

    Provides:
        - created_by: User ID who created the record
        - updated_by: User ID who last updated the record
        - deleted_by: User ID who soft deleted the record

    Note: User IDs are nullable to support system-generated records
          (e.g., seed scripts)
    """

    @declared_attr
    def created_by(cls) -> Mapped[str | None]:
        return mapped_column(
            String, ForeignKey("user.id", ondelete="SET NULL"), nullable=True, index=True
        )

    @declared_attr
    def updated_by(cls) -> Mapped[str | None]:
        return mapped_column(String, ForeignKey("user.id", ondelete="SET NULL"), nullable=True)

    @declared_attr
    def deleted_by(cls) -> Mapped[str | None]:
        return mapped_column(String, ForeignKey("user.id", ondelete="SET NULL"), nullable=True)


class VersionedMixin:
    """
    Optimistic locking with version tracking.

    Provides:
        - version: Integer counter, 1 on creation, +1 on each accepted mutation

    Writers never assign it directly; the conditional update in
    VersionedRepository is the only place it changes:

        update(Model)
        .where(Model.id == id, Model.version == expected, Model.is_deleted.is_(False))
        .values(data, version=Model.version + 1)

    Zero affected rows means someone else got there first.
    """

    @declared_attr
    def version(cls) -> Mapped[int]:
        return mapped_column(Integer, default=1, server_default="1", nullable=False)


class VersionedAggregateMixin(CuidMixin, UserAuditMixin, VersionedMixin):
    """
    Complete mixin for mutable aggregates (users, roles, permissions,
    customers, service orders).

    Combines:
        - CuidMixin: CUID primary key
        - UserAuditMixin: Timestamps + user tracking + soft delete
        - VersionedMixin: Optimistic locking counter
    """

    __abstract__ = True
