from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.domain.enums import OrderSource, OrderStatus
from backoffice.infrastructure.persistence.database import Base
from backoffice.infrastructure.persistence.models.mixins import VersionedAggregateMixin


class ServiceOrder(VersionedAggregateMixin, Base):
    """Buyback or consignment order taken from a customer."""

    __tablename__ = "service_order"

    order_number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    order_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    order_source: Mapped[str] = mapped_column(
        String(20), nullable=False, default=OrderSource.OFFLINE.value
    )
    customer_id: Mapped[str] = mapped_column(
        String, ForeignKey("customer.id"), nullable=False, index=True
    )
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=OrderStatus.PENDING.value, index=True
    )
    consignment_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    consignment_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    renewal_option: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
