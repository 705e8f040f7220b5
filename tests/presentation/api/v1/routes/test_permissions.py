"""Test permission endpoints, route guards and denial recording"""

import pytest
from fastapi import status
from sqlalchemy import select

from backoffice.infrastructure.persistence.models import PermissionFailureLog

PERMISSIONS = "/api/v1/permissions"


@pytest.mark.asyncio
async def test_create_permission(client, auth_headers):
    response = await client.post(
        PERMISSIONS,
        json={
            "permission_code": "serviceOrder.consignment.read",
            "name": "Read consignment orders",
            "permission_type": "route",
            "route_path": "/service-orders/consignment",
        },
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["permission_type"] == "route"
    assert data["version"] == 1


@pytest.mark.asyncio
async def test_duplicate_permission_code(client, auth_headers):
    response = await client.post(
        PERMISSIONS,
        json={"permission_code": "customer.read", "name": "Read customers again"},
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["error"] == "DUPLICATE"


@pytest.mark.asyncio
async def test_invalid_permission_type_rejected(client, auth_headers):
    response = await client.post(
        PERMISSIONS,
        json={"permission_code": "x.y", "name": "x", "permission_type": "menu"},
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_delete_permission_held_by_role(client, auth_headers):
    listing = await client.get(
        PERMISSIONS, params={"keyword": "customer.read"}, headers=auth_headers
    )
    permission = listing.json()[0]

    response = await client.delete(
        f"{PERMISSIONS}/{permission['id']}?version={permission['version']}", headers=auth_headers
    )

    assert response.status_code == 422
    assert response.json()["error"] == "IN_USE"


@pytest.mark.asyncio
async def test_check_permissions_with_wildcards(client, headers_for, seed, test_db):
    user = await seed.user_with_permissions("buyer", ["serviceOrder.buyback.read"])
    await test_db.commit()

    response = await client.post(
        f"{PERMISSIONS}/check",
        json={
            "permission_codes": [
                "serviceOrder.buyback.read",
                "serviceOrder.*.read",
                "serviceOrder.read",
                "serviceOrder.buyback.read.extra",
            ]
        },
        headers=headers_for(user),
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "user_id": user.id,
        "results": {
            "serviceOrder.buyback.read": True,
            "serviceOrder.*.read": True,
            "serviceOrder.read": False,
            "serviceOrder.buyback.read.extra": False,
        },
    }


@pytest.mark.asyncio
async def test_guarded_route_denies_and_records(client, headers_for, seed, test_db):
    user = await seed.user_with_permissions("viewer", ["customer.read"])
    await test_db.commit()

    response = await client.post(
        "/api/v1/customers",
        json={"name": "Jane Roe", "id_number": "ID-9"},
        headers={**headers_for(user), "X-Trace-ID": "deny-trace", "User-Agent": "pytest"},
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["details"]["permission_code"] == "customer.create"

    result = await test_db.execute(
        select(PermissionFailureLog).where(PermissionFailureLog.user_id == user.id)
    )
    failures = list(result.scalars().all())
    assert len(failures) == 1
    assert failures[0].attempted_resource == "POST /api/v1/customers"
    assert failures[0].failure_reason == "missing permission: customer.create"
    assert failures[0].trace_id == "deny-trace"
    assert failures[0].user_agent == "pytest"

    listed = await client.get("/api/v1/customers", headers=headers_for(user))
    assert listed.status_code == status.HTTP_200_OK


@pytest.mark.asyncio
async def test_denials_listed_for_auditors(client, auth_headers, headers_for, seed, test_db):
    user = await seed.user("nobody")
    await test_db.commit()
    await client.get("/api/v1/roles", headers=headers_for(user))

    response = await client.get(
        "/api/v1/permission-failures", params={"user_id": user.id}, headers=auth_headers
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["attempted_resource"] == "GET /api/v1/roles"
