"""Tests for account management"""

import pytest

from backoffice.application.services.account_service import AccountService
from backoffice.domain.exceptions import (
    ConflictError,
    DuplicateError,
    NotFoundError,
    PolicyViolationError,
    ValidationException,
)
from backoffice.infrastructure.persistence.repositories.audit_log_repo import AuditLogFilter
from backoffice.infrastructure.security.password import verify_password
from backoffice.shared.context import set_current_user


@pytest.fixture
def account_service(test_db, audit_service, authz_service):
    return AccountService(test_db, audit_service, authz_service)


@pytest.fixture
async def operator(seed):
    """Authenticated operator performing the calls"""
    user = await seed.user("operator")
    set_current_user(user.id, user.display_name)
    return user


@pytest.mark.asyncio
async def test_create_account_lowercases_and_hashes(account_service, operator):
    user = await account_service.create_account("  Alice.Smith ", "Alice Smith", "secret123")

    assert user.account == "alice.smith"
    assert user.version == 1
    assert user.created_by == operator.id
    assert user.password_hash != "secret123"
    assert verify_password("secret123", user.password_hash)


@pytest.mark.asyncio
async def test_duplicate_account_is_case_insensitive(account_service, operator):
    await account_service.create_account("bob", "Bob", "secret123")

    with pytest.raises(DuplicateError):
        await account_service.create_account("BOB", "Bobby", "secret123")


@pytest.mark.asyncio
async def test_create_account_rejects_short_password(account_service, operator):
    with pytest.raises(ValidationException) as exc_info:
        await account_service.create_account("carol", "Carol", "123")

    assert exc_info.value.details == {"field": "password"}


@pytest.mark.asyncio
async def test_create_account_is_audited_without_password_hash(
    account_service, audit_service, operator
):
    user = await account_service.create_account("dave", "Dave", "secret123")

    entries, total = await audit_service.list_logs(AuditLogFilter(target_id=user.id))

    assert total == 1
    assert entries[0].operation_type == "create"
    assert entries[0].operator_id == operator.id
    assert entries[0].after_state["account"] == "dave"
    assert entries[0].after_state["password_hash"] == "[REDACTED]"


@pytest.mark.asyncio
async def test_search_accounts(account_service, seed, operator):
    await seed.user("erin", display_name="Erin Example")
    await seed.user("frank", display_name="Frank")

    items, total = await account_service.search_accounts("exam")

    assert total == 1
    assert items[0].account == "erin"


@pytest.mark.asyncio
async def test_update_account_checks_version(account_service, seed, operator):
    user = await seed.user("grace")

    updated = await account_service.update_account(user.id, 1, "Grace Hopper")
    assert updated.display_name == "Grace Hopper"
    assert updated.version == 2

    with pytest.raises(ConflictError):
        await account_service.update_account(user.id, 1, "Stale Write")


@pytest.mark.asyncio
async def test_change_password(account_service, seed, operator):
    user = await seed.user("heidi", password="old-secret")

    updated = await account_service.change_password(user.id, 1, "old-secret", "new-secret")

    assert verify_password("new-secret", updated.password_hash)
    assert updated.version == 2


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "old_password,new_password,field",
    [
        ("wrong-secret", "new-secret", "old_password"),
        ("old-secret", "old-secret", "new_password"),
        ("old-secret", "abc", "password"),
    ],
)
async def test_change_password_validation(
    account_service, seed, operator, old_password, new_password, field
):
    user = await seed.user("ivan", password="old-secret")

    with pytest.raises(ValidationException) as exc_info:
        await account_service.change_password(user.id, 1, old_password, new_password)

    assert exc_info.value.details["field"] == field


@pytest.mark.asyncio
async def test_self_delete_is_refused_whatever_the_version(account_service, operator):
    for version in (1, 99):
        with pytest.raises(PolicyViolationError) as exc_info:
            await account_service.delete_account(operator.id, version)
        assert exc_info.value.error_code == "SELF_DELETE"


@pytest.mark.asyncio
async def test_last_active_account_cannot_be_deleted(account_service, seed):
    only = await seed.user("only")

    with pytest.raises(PolicyViolationError) as exc_info:
        await account_service.delete_account(only.id, 1)

    assert exc_info.value.error_code == "LAST_ACCOUNT_DELETE"


@pytest.mark.asyncio
async def test_delete_account(account_service, audit_service, seed, operator):
    target = await seed.user("judy")

    with pytest.raises(ConflictError):
        await account_service.delete_account(target.id, 5)
    await account_service.delete_account(target.id, 1)

    with pytest.raises(NotFoundError):
        await account_service.get_account(target.id)
    entries, _ = await audit_service.list_logs(
        AuditLogFilter(target_id=target.id, operation_type="delete")
    )
    assert len(entries) == 1
    assert entries[0].before_state["account"] == "judy"


@pytest.mark.asyncio
async def test_deleted_account_frees_the_name(account_service, seed, operator):
    target = await seed.user("mallory")
    await account_service.delete_account(target.id, 1)

    recreated = await account_service.create_account("mallory", "Mallory II", "secret123")

    assert recreated.id != target.id


@pytest.mark.asyncio
async def test_get_profile(account_service, seed):
    user = await seed.user_with_permissions("kim", ["role.read", "customer.read"])

    profile = await account_service.get_profile(user.id)

    assert profile.user.id == user.id
    assert [role.role_name for role in profile.roles] == ["kim-role"]
    assert profile.permission_codes == ["customer.read", "role.read"]
