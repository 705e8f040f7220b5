"""Tests for role management and permission grants"""

import pytest

from backoffice.application.services.authorization_service import AuthorizationService
from backoffice.application.services.role_service import RoleService
from backoffice.domain.exceptions import (
    ConflictError,
    DuplicateError,
    InUseError,
    NotFoundError,
    ValidationException,
)
from backoffice.infrastructure.persistence.repositories.assignment_repo import (
    AssignmentRepository,
)


@pytest.fixture
def role_service(test_db, audit_service, authz_service):
    return RoleService(test_db, audit_service, authz_service)


@pytest.mark.asyncio
async def test_create_role(role_service):
    role = await role_service.create_role("  Appraiser ", "Values goods")

    assert role.role_name == "Appraiser"
    assert role.version == 1


@pytest.mark.asyncio
async def test_create_role_validation(role_service):
    await role_service.create_role("Cashier")

    with pytest.raises(DuplicateError):
        await role_service.create_role("Cashier")
    with pytest.raises(ValidationException):
        await role_service.create_role("   ")


@pytest.mark.asyncio
async def test_update_role_rename(role_service):
    role = await role_service.create_role("Clerk")
    await role_service.create_role("Manager")

    with pytest.raises(DuplicateError):
        await role_service.update_role(role.id, 1, role_name="Manager")

    updated = await role_service.update_role(role.id, 1, role_name="Senior Clerk")
    assert updated.role_name == "Senior Clerk"
    assert updated.version == 2

    with pytest.raises(ConflictError):
        await role_service.update_role(role.id, 1, description="stale")


@pytest.mark.asyncio
async def test_assign_permissions_is_idempotent(role_service, seed):
    role = await seed.role("Auditor")
    read = await seed.permission("auditLog.read")
    failures = await seed.permission("auditLog.failures")

    assert await role_service.assign_permissions(role.id, [read.id]) == 1
    assert await role_service.assign_permissions(role.id, [read.id, failures.id, read.id]) == 1
    assert await role_service.assign_permissions(role.id, [read.id, failures.id]) == 0

    _, permissions = await role_service.get_role_detail(role.id)
    assert [p.permission_code for p in permissions] == ["auditLog.failures", "auditLog.read"]


@pytest.mark.asyncio
async def test_assign_unknown_permission_adds_nothing(role_service, seed, test_db):
    role = await seed.role("Auditor")
    read = await seed.permission("auditLog.read")

    with pytest.raises(NotFoundError):
        await role_service.assign_permissions(role.id, [read.id, "missing-permission"])

    assert await AssignmentRepository(test_db).get_permissions_for_role(role.id) == []


@pytest.mark.asyncio
async def test_grant_changes_are_visible_to_authorization(role_service, seed, test_db):
    user = await seed.user("viewer")
    role = await seed.role("Viewer")
    permission = await seed.permission("customer.read")
    await seed.assign(user, role)
    authz = role_service.authorization

    assert await authz.authorize(user.id, "customer.read") is False
    await role_service.assign_permissions(role.id, [permission.id])
    assert await authz.authorize(user.id, "customer.read") is True

    await role_service.remove_permission(role.id, permission.id)
    assert await AuthorizationService(AssignmentRepository(test_db)).authorize(
        user.id, "customer.read"
    ) is False


@pytest.mark.asyncio
async def test_remove_missing_grant_raises_not_found(role_service, seed):
    role = await seed.role("Empty")

    with pytest.raises(NotFoundError) as exc_info:
        await role_service.remove_permission(role.id, "perm-x")

    assert exc_info.value.details["resource_type"] == "RolePermission"


@pytest.mark.asyncio
async def test_role_in_use_cannot_be_deleted(role_service, seed, test_db):
    user = await seed.user("holder")
    role = await seed.role("Assigned")
    await seed.assign(user, role)

    with pytest.raises(InUseError):
        await role_service.delete_role(role.id, 99)

    await AssignmentRepository(test_db).remove_role(user.id, role.id)
    await role_service.delete_role(role.id, 1)

    with pytest.raises(NotFoundError):
        await role_service.get_role(role.id)
    assert await role_service.list_roles() == []


@pytest.mark.asyncio
async def test_delete_role_version_conflict(role_service, seed):
    role = await seed.role("Unused")

    with pytest.raises(ConflictError):
        await role_service.delete_role(role.id, 2)

    assert (await role_service.get_role(role.id)).is_deleted is False
