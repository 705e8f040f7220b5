from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.infrastructure.persistence.models.customer import Customer
from backoffice.infrastructure.persistence.repositories.versioned_repo import VersionedRepository


class CustomerRepository(VersionedRepository[Customer]):
    resource_type = "Customer"
    unique_field = "id_number"

    def __init__(self, db: AsyncSession):
        super().__init__(db, Customer)

    async def get_by_id_number(self, id_number: str) -> Customer | None:
        result = await self.db.execute(
            select(Customer).where(Customer.id_number == id_number, self._active())
        )
        return result.scalar_one_or_none()
