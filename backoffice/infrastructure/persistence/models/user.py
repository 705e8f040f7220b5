from sqlalchemy import Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.infrastructure.persistence.database import Base
from backoffice.infrastructure.persistence.models.mixins import VersionedAggregateMixin


class User(VersionedAggregateMixin, Base):
    """Back-office principal. Accounts are stored lower-cased."""

    __tablename__ = "user"

    account: Mapped[str] = mapped_column(String(50), nullable=False)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (
        Index(
            "uq_user_account_active",
            "account",
            unique=True,
            sqlite_where=text("is_deleted = 0"),
            postgresql_where=text("is_deleted = false"),
        ),
    )
