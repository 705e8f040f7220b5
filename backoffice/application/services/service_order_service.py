"""
Buyback and consignment service orders.

Order numbers are the type prefix (BS buyback, CS consignment), the UTC
date as YYYYMMDD and a three-digit sequence that restarts every day, e.g.
BS20260115001.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from backoffice.application.services.audit_service import AuditService, snapshot
from backoffice.application.services.concurrency import VersionedMutator
from backoffice.domain.enums import OrderSource, OrderStatus, OrderType
from backoffice.domain.exceptions import (
    NotFoundError,
    PolicyViolationError,
    ValidationException,
)
from backoffice.infrastructure.persistence.models.service_order import ServiceOrder
from backoffice.infrastructure.persistence.repositories.customer_repo import CustomerRepository
from backoffice.infrastructure.persistence.repositories.service_order_repo import (
    ServiceOrderRepository,
)
from backoffice.shared.context import get_current_actor_id
from backoffice.shared.enums import OperationType, TargetType
from backoffice.shared.telemetry.logging import get_logger
from backoffice.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

SEQUENCE_DIGITS = 3
MAX_DAILY_SEQUENCE = 10**SEQUENCE_DIGITS - 1
CLOSED_STATUSES = frozenset({OrderStatus.COMPLETED.value, OrderStatus.TERMINATED.value})


class ServiceOrderService:
    def __init__(self, db: AsyncSession, audit: AuditService):
        self.db = db
        self.orders = ServiceOrderRepository(db)
        self.customers = CustomerRepository(db)
        self.mutator = VersionedMutator(self.orders)
        self.audit = audit

    async def generate_order_number(self, order_type: OrderType) -> str:
        prefix = f"{order_type.number_prefix}{utc_now():%Y%m%d}"
        last = await self.orders.get_last_order_number(prefix)
        sequence = int(last[len(prefix):]) + 1 if last else 1
        if sequence > MAX_DAILY_SEQUENCE:
            raise PolicyViolationError(
                f"Daily order number sequence exhausted for {prefix}",
                "ORDER_SEQUENCE_EXHAUSTED",
            )
        return f"{prefix}{sequence:0{SEQUENCE_DIGITS}d}"

    @staticmethod
    def _validate_consignment_period(start: date | None, end: date | None) -> None:
        if start and end and end < start:
            raise ValidationException(
                "Consignment end date must not be before the start date",
                field="consignment_end_date",
            )

    async def create_order(
        self,
        order_type: str,
        customer_id: str,
        total_amount: Decimal,
        order_source: str = OrderSource.OFFLINE.value,
        consignment_start_date: date | None = None,
        consignment_end_date: date | None = None,
        renewal_option: bool = False,
    ) -> ServiceOrder:
        if order_type not in OrderType.values():
            raise ValidationException(f"Invalid order type '{order_type}'", field="order_type")
        if order_source not in OrderSource.values():
            raise ValidationException(
                f"Invalid order source '{order_source}'", field="order_source"
            )
        if total_amount < 0:
            raise ValidationException("Total amount must not be negative", field="total_amount")
        self._validate_consignment_period(consignment_start_date, consignment_end_date)
        if not await self.customers.exists_active(customer_id):
            raise NotFoundError("Customer", customer_id)

        actor_id = get_current_actor_id()
        order = await self.orders.create(
            ServiceOrder(
                order_number=await self.generate_order_number(OrderType(order_type)),
                order_type=order_type,
                order_source=order_source,
                customer_id=customer_id,
                total_amount=total_amount,
                status=OrderStatus.PENDING.value,
                consignment_start_date=consignment_start_date,
                consignment_end_date=consignment_end_date,
                renewal_option=renewal_option,
                created_by=actor_id,
                updated_by=actor_id,
            )
        )
        await self.audit.record_change(
            OperationType.CREATE, TargetType.SERVICE_ORDER, order.id, after_state=snapshot(order)
        )
        logger.info("Created service order %s", order.order_number)
        return order

    async def get_order(self, order_id: str) -> ServiceOrder:
        return await self.mutator.get_active_or_raise(order_id)

    async def list_orders(
        self,
        order_type: str | None = None,
        status: str | None = None,
        customer_id: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> list[ServiceOrder]:
        return await self.orders.search(
            order_type, status, customer_id, skip=(page - 1) * page_size, limit=page_size
        )

    async def update_order(
        self,
        order_id: str,
        expected_version: int,
        total_amount: Decimal | None = None,
        consignment_start_date: date | None = None,
        consignment_end_date: date | None = None,
        renewal_option: bool | None = None,
    ) -> ServiceOrder:
        """Edit a pending order"""
        current = await self.mutator.get_active_or_raise(order_id)
        if current.status in CLOSED_STATUSES:
            raise PolicyViolationError(
                f"Service order {current.order_number} is {current.status} and cannot be edited",
                "ORDER_CLOSED",
            )

        values: dict[str, Any] = {}
        if total_amount is not None:
            if total_amount < 0:
                raise ValidationException(
                    "Total amount must not be negative", field="total_amount"
                )
            values["total_amount"] = total_amount
        if consignment_start_date is not None:
            values["consignment_start_date"] = consignment_start_date
        if consignment_end_date is not None:
            values["consignment_end_date"] = consignment_end_date
        if renewal_option is not None:
            values["renewal_option"] = renewal_option
        self._validate_consignment_period(
            values.get("consignment_start_date", current.consignment_start_date),
            values.get("consignment_end_date", current.consignment_end_date),
        )

        before = snapshot(current)
        order = await self.mutator.update(order_id, expected_version, values)
        await self.audit.record_change(
            OperationType.UPDATE, TargetType.SERVICE_ORDER, order_id, before, snapshot(order)
        )
        return order

    async def update_status(self, order_id: str, expected_version: int, status: str) -> ServiceOrder:
        """
        Move a pending order to COMPLETED or TERMINATED.

        Raises:
            PolicyViolationError: The order is already closed
        """
        if status not in OrderStatus.values():
            raise ValidationException(f"Invalid order status '{status}'", field="status")

        current = await self.mutator.get_active_or_raise(order_id)
        if current.status in CLOSED_STATUSES:
            raise PolicyViolationError(
                f"Service order {current.order_number} is already {current.status}",
                "ORDER_CLOSED",
            )

        before = snapshot(current)
        order = await self.mutator.update(order_id, expected_version, {"status": status})
        await self.audit.record_change(
            OperationType.UPDATE, TargetType.SERVICE_ORDER, order_id, before, snapshot(order)
        )
        return order

    async def delete_order(self, order_id: str, expected_version: int) -> None:
        before = snapshot(await self.mutator.get_active_or_raise(order_id))
        await self.mutator.delete(order_id, expected_version)
        await self.audit.record_change(
            OperationType.DELETE, TargetType.SERVICE_ORDER, order_id, before
        )
