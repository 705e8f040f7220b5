from sqlalchemy import Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.infrastructure.persistence.database import Base
from backoffice.infrastructure.persistence.models.mixins import VersionedAggregateMixin


class Customer(VersionedAggregateMixin, Base):
    __tablename__ = "customer"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str | None] = mapped_column(String(100), nullable=True)
    id_number: Mapped[str] = mapped_column(String(30), nullable=False)

    __table_args__ = (
        Index(
            "uq_customer_id_number_active",
            "id_number",
            unique=True,
            sqlite_where=text("is_deleted = 0"),
            postgresql_where=text("is_deleted = false"),
        ),
    )
