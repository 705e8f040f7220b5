from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.infrastructure.persistence.models.service_order import ServiceOrder
from backoffice.infrastructure.persistence.repositories.versioned_repo import VersionedRepository


class ServiceOrderRepository(VersionedRepository[ServiceOrder]):
    resource_type = "ServiceOrder"
    unique_field = "order_number"

    def __init__(self, db: AsyncSession):
        super().__init__(db, ServiceOrder)

    async def get_last_order_number(self, prefix: str) -> str | None:
        """
        Highest order number starting with ``prefix``.

        Deleted orders are included so their numbers are never reissued.
        """
        result = await self.db.execute(
            select(ServiceOrder.order_number)
            .where(ServiceOrder.order_number.like(f"{prefix}%"))
            .order_by(ServiceOrder.order_number.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def search(
        self,
        order_type: str | None = None,
        status: str | None = None,
        customer_id: str | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> list[ServiceOrder]:
        query = select(ServiceOrder).where(self._active())
        if order_type:
            query = query.where(ServiceOrder.order_type == order_type)
        if status:
            query = query.where(ServiceOrder.status == status)
        if customer_id:
            query = query.where(ServiceOrder.customer_id == customer_id)

        result = await self.db.execute(
            query.order_by(ServiceOrder.order_number.desc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all())
