"""Customer records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from backoffice.application.services.audit_service import AuditService, snapshot
from backoffice.application.services.concurrency import VersionedMutator
from backoffice.domain.exceptions import DuplicateError
from backoffice.infrastructure.persistence.models.customer import Customer
from backoffice.infrastructure.persistence.repositories.customer_repo import CustomerRepository
from backoffice.shared.context import get_current_actor_id
from backoffice.shared.enums import OperationType, TargetType

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class CustomerService:
    def __init__(self, db: AsyncSession, audit: AuditService):
        self.db = db
        self.customers = CustomerRepository(db)
        self.mutator = VersionedMutator(self.customers)
        self.audit = audit

    async def create_customer(
        self,
        name: str,
        id_number: str,
        phone_number: str | None = None,
        email: str | None = None,
    ) -> Customer:
        if await self.customers.get_by_id_number(id_number):
            raise DuplicateError("Customer", "id_number", id_number)

        actor_id = get_current_actor_id()
        customer = await self.customers.create(
            Customer(
                name=name,
                id_number=id_number,
                phone_number=phone_number,
                email=email,
                created_by=actor_id,
                updated_by=actor_id,
            )
        )
        await self.audit.record_change(
            OperationType.CREATE, TargetType.CUSTOMER, customer.id, after_state=snapshot(customer)
        )
        return customer

    async def get_customer(self, customer_id: str) -> Customer:
        return await self.mutator.get_active_or_raise(customer_id)

    async def list_customers(self, page: int = 1, page_size: int = 20) -> list[Customer]:
        return await self.customers.list_active(skip=(page - 1) * page_size, limit=page_size)

    async def update_customer(
        self, customer_id: str, expected_version: int, **changes: Any
    ) -> Customer:
        """
        Update name, phone number, email or id number.

        None values are ignored; a changed id number must stay unique.
        """
        current = await self.mutator.get_active_or_raise(customer_id)
        values = {
            key: value
            for key, value in changes.items()
            if key in ("name", "phone_number", "email", "id_number") and value is not None
        }
        new_id_number = values.get("id_number")
        if new_id_number and new_id_number != current.id_number:
            if await self.customers.get_by_id_number(new_id_number):
                raise DuplicateError("Customer", "id_number", new_id_number)

        before = snapshot(current)
        customer = await self.mutator.update(customer_id, expected_version, values)
        await self.audit.record_change(
            OperationType.UPDATE, TargetType.CUSTOMER, customer_id, before, snapshot(customer)
        )
        return customer

    async def delete_customer(self, customer_id: str, expected_version: int) -> None:
        before = snapshot(await self.mutator.get_active_or_raise(customer_id))
        await self.mutator.delete(customer_id, expected_version)
        await self.audit.record_change(
            OperationType.DELETE, TargetType.CUSTOMER, customer_id, before
        )
