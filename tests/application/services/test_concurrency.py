"""Tests for version-checked updates and deletes"""

from unittest.mock import AsyncMock

import pytest

from backoffice.application.services.concurrency import VersionedMutator
from backoffice.domain.exceptions import ConflictError, DuplicateError, NotFoundError
from backoffice.infrastructure.persistence.models import Customer, Role
from backoffice.infrastructure.persistence.repositories.customer_repo import CustomerRepository
from backoffice.infrastructure.persistence.repositories.role_repo import RoleRepository
from backoffice.shared.context import set_current_user


@pytest.fixture
def customers(test_db):
    return CustomerRepository(test_db)


@pytest.fixture
def mutator(customers):
    return VersionedMutator(customers)


@pytest.fixture
async def customer(customers):
    return await customers.create(Customer(name="Jane Roe", id_number="ID-001"))


@pytest.mark.asyncio
async def test_new_aggregate_starts_at_version_one(customer):
    assert customer.version == 1
    assert customer.is_deleted is False


@pytest.mark.asyncio
async def test_update_increments_version_then_stale_write_conflicts(mutator, customers, customer):
    await mutator.update(customer.id, 1, {"name": "Jane A. Roe"})
    await mutator.update(customer.id, 2, {"name": "Jane B. Roe"})

    updated = await mutator.update(customer.id, 3, {"phone_number": "555-0100"})
    assert updated.version == 4
    assert updated.phone_number == "555-0100"

    with pytest.raises(ConflictError) as exc_info:
        await mutator.update(customer.id, 3, {"phone_number": "555-0199"})

    assert exc_info.value.details["expected_version"] == 3
    assert exc_info.value.details["current_version"] == 4
    stored = await customers.reload(customer.id)
    assert stored.version == 4
    assert stored.phone_number == "555-0100"


@pytest.mark.asyncio
async def test_update_accepts_callable_mutation(mutator, customer):
    updated = await mutator.update(
        customer.id, 1, lambda current: {"name": current.name.upper()}
    )

    assert updated.name == "JANE ROE"
    assert updated.version == 2


@pytest.mark.asyncio
async def test_update_stamps_current_actor(mutator, customer, seed):
    operator = await seed.user("operator")
    set_current_user(None, "system")

    updated = await mutator.update(customer.id, 1, {"email": "jane@example.com"})

    assert updated.updated_by is None

    set_current_user(operator.id, operator.display_name)
    updated = await mutator.update(customer.id, 2, {"email": "roe@example.com"})
    assert updated.updated_by == operator.id


@pytest.mark.asyncio
async def test_update_missing_aggregate_raises_not_found(mutator):
    with pytest.raises(NotFoundError):
        await mutator.update("does-not-exist", 1, {"name": "x"})


@pytest.mark.asyncio
async def test_delete_is_version_checked(mutator, customers, customer):
    with pytest.raises(ConflictError):
        await mutator.delete(customer.id, 7)

    assert await customers.exists_active(customer.id) is True

    await mutator.delete(customer.id, 1)

    assert await customers.exists_active(customer.id) is False
    deleted = await customers.reload(customer.id)
    assert deleted.is_deleted is True
    assert deleted.version == 2
    assert deleted.deleted_at is not None


@pytest.mark.asyncio
async def test_soft_deleted_aggregate_is_not_found_but_addressable(mutator, customers, customer):
    await mutator.delete(customer.id, 1)

    with pytest.raises(NotFoundError):
        await mutator.update(customer.id, 2, {"name": "ghost"})
    with pytest.raises(NotFoundError):
        await mutator.delete(customer.id, 2)

    assert await customers.get_by_id(customer.id) is not None


@pytest.mark.asyncio
async def test_update_colliding_with_unique_index_raises_duplicate(test_db):
    roles = RoleRepository(test_db)
    await roles.create(Role(role_name="admin"))
    clerk = await roles.create(Role(role_name="Clerk"))

    with pytest.raises(DuplicateError):
        await VersionedMutator(roles).update(clerk.id, 1, {"role_name": "admin"})


@pytest.mark.asyncio
async def test_row_vanishing_after_write_raises_not_found():
    store = AsyncMock()
    store.resource_type = "Customer"
    store.get_active.return_value = Customer(id="c1", name="Jane Roe", id_number="ID-001")
    store.conditional_update.return_value = True
    store.reload.return_value = None

    with pytest.raises(NotFoundError) as exc_info:
        await VersionedMutator(store).update("c1", 1, {"name": "Jane A. Roe"})

    assert exc_info.value.details["resource_id"] == "c1"
