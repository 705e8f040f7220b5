"""Test customer and service order endpoints"""

import pytest
from fastapi import status


async def create_customer(client, headers, id_number: str = "ID-100") -> dict:
    response = await client.post(
        "/api/v1/customers",
        json={"name": "Jane Roe", "id_number": id_number, "email": "jane@example.com"},
        headers=headers,
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


@pytest.mark.asyncio
async def test_customer_lifecycle(client, auth_headers):
    customer = await create_customer(client, auth_headers)
    url = f"/api/v1/customers/{customer['id']}"

    updated = await client.put(
        url, json={"version": 1, "phone_number": "555-0100"}, headers=auth_headers
    )
    assert updated.json()["version"] == 2
    assert updated.json()["email"] == "jane@example.com"

    duplicate = await client.post(
        "/api/v1/customers", json={"name": "Other", "id_number": "ID-100"}, headers=auth_headers
    )
    assert duplicate.status_code == status.HTTP_409_CONFLICT

    stale = await client.delete(f"{url}?version=1", headers=auth_headers)
    assert stale.status_code == status.HTTP_409_CONFLICT
    deleted = await client.delete(f"{url}?version=2", headers=auth_headers)
    assert deleted.status_code == status.HTTP_204_NO_CONTENT


@pytest.mark.asyncio
async def test_create_buyback_order(client, auth_headers):
    customer = await create_customer(client, auth_headers)

    response = await client.post(
        "/api/v1/service-orders",
        json={"order_type": "BUYBACK", "customer_id": customer["id"], "total_amount": "150.00"},
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_201_CREATED
    order = response.json()
    assert order["order_number"].startswith("BS")
    assert len(order["order_number"]) == len("BS20260101001")
    assert order["status"] == "PENDING"
    assert order["version"] == 1


@pytest.mark.asyncio
async def test_order_status_is_version_checked(client, auth_headers):
    customer = await create_customer(client, auth_headers)
    order = (
        await client.post(
            "/api/v1/service-orders",
            json={"order_type": "BUYBACK", "customer_id": customer["id"], "total_amount": "10"},
            headers=auth_headers,
        )
    ).json()
    url = f"/api/v1/service-orders/{order['id']}/status"

    stale = await client.patch(
        url, json={"version": 3, "status": "COMPLETED"}, headers=auth_headers
    )
    completed = await client.patch(
        url, json={"version": 1, "status": "COMPLETED"}, headers=auth_headers
    )
    closed = await client.patch(
        url, json={"version": 2, "status": "TERMINATED"}, headers=auth_headers
    )

    assert stale.status_code == status.HTTP_409_CONFLICT
    assert completed.json()["status"] == "COMPLETED"
    assert completed.json()["version"] == 2
    assert closed.status_code == 422
    assert closed.json()["error"] == "ORDER_CLOSED"


@pytest.mark.asyncio
async def test_order_permissions_are_per_type(client, auth_headers, headers_for, seed, test_db):
    customer = await create_customer(client, auth_headers)
    user = await seed.user_with_permissions("consigner", ["serviceOrder.consignment.read"])
    await test_db.commit()

    listed = await client.get("/api/v1/service-orders", headers=headers_for(user))
    denied = await client.post(
        "/api/v1/service-orders",
        json={"order_type": "BUYBACK", "customer_id": customer["id"], "total_amount": "10"},
        headers=headers_for(user),
    )

    assert listed.status_code == status.HTTP_200_OK
    assert denied.status_code == status.HTTP_403_FORBIDDEN
    assert denied.json()["details"]["permission_code"] == "serviceOrder.buyback.create"
