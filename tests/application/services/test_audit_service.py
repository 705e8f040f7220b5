"""Tests for the audit trail recorder"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from backoffice.application.services.audit_service import (
    REDACTED,
    AuditService,
    redact,
    snapshot,
)
from backoffice.infrastructure.persistence.models import Customer
from backoffice.infrastructure.persistence.repositories.audit_log_repo import AuditLogFilter
from backoffice.shared.context import set_current_user, set_request_metadata
from backoffice.shared.enums import OperationType, TargetType


def test_redact_matches_keys_case_insensitively():
    state = {"account": "alice", "Password_Hash": "$2b$...", "token": "abc"}

    assert redact(state, {"password_hash", "token"}) == {
        "account": "alice",
        "Password_Hash": REDACTED,
        "token": REDACTED,
    }
    assert redact(None, {"token"}) is None


@pytest.mark.asyncio
async def test_snapshot_is_json_safe(test_db):
    customer = Customer(name="Jane Roe", id_number="ID-9")
    test_db.add(customer)
    await test_db.flush()
    await test_db.refresh(customer)

    state = snapshot(customer)

    assert state["name"] == "Jane Roe"
    assert state["version"] == 1
    assert isinstance(state["created_at"], str)


@pytest.mark.asyncio
async def test_record_persists_entry(audit_service, test_db):
    entry = await audit_service.record(
        operator_id=None,
        operator_name="system",
        operation_type=OperationType.UPDATE,
        target_type=TargetType.CUSTOMER,
        target_id="cust-1",
        before_state={"name": "old", "total": Decimal("10.50")},
        after_state={"name": "new", "total": Decimal("12.00")},
        trace_id="trace-1",
        ip_address="10.0.0.1",
        user_agent="pytest",
        additional_info={"reason": "typo"},
    )

    assert entry is not None
    stored = await audit_service.get_by_id(entry.id)
    assert stored.operation_type == "update"
    assert stored.target_type == "customer"
    assert stored.before_state == {"name": "old", "total": "10.50"}
    assert stored.after_state == {"name": "new", "total": "12.00"}
    assert stored.ip_address == "10.0.0.1"
    assert stored.additional_info == {"reason": "typo"}


@pytest.mark.asyncio
async def test_sensitive_fields_are_never_persisted(audit_service):
    entry = await audit_service.record(
        operator_id=None,
        operator_name="system",
        operation_type="create",
        target_type="user",
        target_id="user-1",
        before_state=None,
        after_state={"account": "alice", "password_hash": "$2b$12$abc"},
        trace_id=None,
    )

    stored = await audit_service.get_by_id(entry.id)
    assert stored.before_state is None
    assert stored.after_state == {"account": "alice", "password_hash": REDACTED}


@pytest.mark.asyncio
async def test_sink_failure_returns_none_without_raising(test_db):
    sink = AsyncMock()
    sink.insert.side_effect = OperationalError("INSERT", {}, Exception("disk full"))
    service = AuditService(test_db, sink=sink)

    entry = await service.record(
        operator_id=None,
        operator_name="system",
        operation_type=OperationType.DELETE,
        target_type=TargetType.ROLE,
        target_id="role-1",
        before_state={"role_name": "old"},
        after_state=None,
        trace_id="trace-x",
    )

    assert entry is None
    sink.insert.assert_awaited_once()


@pytest.mark.asyncio
async def test_unknown_operation_type_is_not_recorded(audit_service):
    entry = await audit_service.record(
        operator_id=None,
        operator_name="system",
        operation_type="rename",
        target_type=TargetType.ROLE,
        target_id="role-1",
        before_state=None,
        after_state=None,
        trace_id=None,
    )

    assert entry is None


@pytest.mark.asyncio
async def test_failed_write_leaves_session_usable(test_db, seed):
    sink = AsyncMock()
    sink.insert.side_effect = OperationalError("INSERT", {}, Exception("locked"))
    service = AuditService(test_db, sink=sink)
    user = await seed.user("survivor")

    await service.record_change(OperationType.CREATE, TargetType.USER, user.id)
    role = await seed.role("after-failure")

    assert role.id is not None


@pytest.mark.asyncio
async def test_record_change_uses_request_context(audit_service, seed):
    operator = await seed.user("operator", display_name="Operator One")
    set_current_user(operator.id, operator.display_name)
    set_request_metadata("trace-ctx", ip_address="192.168.1.5", user_agent="browser")

    entry = await audit_service.record_change(
        OperationType.CREATE, TargetType.CUSTOMER, "cust-1", after_state={"name": "Jane"}
    )

    assert entry.operator_id == operator.id
    assert entry.operator_name == "Operator One"
    assert entry.trace_id == "trace-ctx"
    assert entry.ip_address == "192.168.1.5"
    assert entry.user_agent == "browser"


@pytest.mark.asyncio
async def test_record_change_without_actor_is_system(audit_service):
    entry = await audit_service.record_change(OperationType.DELETE, TargetType.CUSTOMER, "c-1")

    assert entry.operator_id is None
    assert entry.operator_name == "system"


@pytest.mark.asyncio
async def test_entries_retrievable_by_trace_id(audit_service):
    set_request_metadata("trace-many")
    await audit_service.record_change(OperationType.CREATE, TargetType.ROLE, "r-1")
    await audit_service.record_change(OperationType.UPDATE, TargetType.ROLE, "r-1")
    set_request_metadata("trace-other")
    await audit_service.record_change(OperationType.CREATE, TargetType.ROLE, "r-2")

    entries = await audit_service.get_by_trace_id("trace-many")

    assert [e.operation_type for e in entries] == ["create", "update"]
    assert await audit_service.get_by_trace_id("missing") == []


@pytest.mark.asyncio
async def test_list_logs_filters_and_paginates(audit_service):
    for i in range(3):
        await audit_service.record_change(OperationType.CREATE, TargetType.CUSTOMER, f"c-{i}")
    await audit_service.record_change(OperationType.UPDATE, TargetType.CUSTOMER, "c-0")
    await audit_service.record_change(OperationType.CREATE, TargetType.ROLE, "r-0")

    items, total = await audit_service.list_logs(
        AuditLogFilter(target_type="customer", operation_type="create"), page=1, page_size=2
    )
    assert total == 3
    assert len(items) == 2

    items, total = await audit_service.list_logs(AuditLogFilter(target_id="c-0"))
    assert total == 2
    assert {e.operation_type for e in items} == {"create", "update"}
