import pytest
from httpx import AsyncClient

from tests.utils.api_helpers import bearer, create_tenant, login_ok, register


@pytest.mark.asyncio
async def test_audit_events_newest_first_with_actor_email(client: AsyncClient, test_data):
    tenant = await create_tenant(client)
    await register(client, "operations")
    await register(client, "cashier", tenant["id"])
    cashier = await login_ok(client, "cashier")
    await client.post("/auth/logout", headers=bearer(cashier["access_token"]))
    ops = await login_ok(client, "operations")

    response = await client.get(
        "/audit/events",
        params={"tenant_id": tenant["id"], "category": "session"},
        headers=bearer(ops["access_token"]),
    )

    assert response.status_code == 200
    events = response.json()["events"]
    assert [e["action"] for e in events] == ["revoked", "started"]
    assert events[0]["actor_email"] == test_data.get("cashier")["email"]
    assert events[0]["metadata"]["reason"] == "logout"
    assert events[0]["timestamp"].endswith("Z")


@pytest.mark.asyncio
async def test_audit_events_pagination(client: AsyncClient):
    tenant = await create_tenant(client)
    await register(client, "superadmin")
    await register(client, "cashier", tenant["id"])
    for _ in range(3):
        tokens = await login_ok(client, "cashier")
        await client.post("/auth/logout", headers=bearer(tokens["access_token"]))
    root = await login_ok(client, "superadmin")
    headers = bearer(root["access_token"])

    first = await client.get("/audit/events", params={"tenant_id": tenant["id"], "limit": 4}, headers=headers)
    cursor = first.json()["next_cursor"]
    assert cursor is not None

    second = await client.get(
        "/audit/events",
        params={"tenant_id": tenant["id"], "limit": 4, "cursor": cursor},
        headers=headers,
    )

    first_ids = [e["id"] for e in first.json()["events"]]
    second_ids = [e["id"] for e in second.json()["events"]]
    assert len(first_ids) == 4
    assert max(second_ids) < min(first_ids)


@pytest.mark.parametrize("key", ["tenant_admin", "cashier"])
@pytest.mark.asyncio
async def test_tenant_accounts_cannot_read_audit(client: AsyncClient, key):
    tenant = await create_tenant(client)
    await register(client, key, tenant["id"])
    tokens = await login_ok(client, key)

    response = await client.get("/audit/events", headers=bearer(tokens["access_token"]))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "INSUFFICIENT_PERMISSION"


@pytest.mark.asyncio
async def test_invalid_category(client: AsyncClient):
    await register(client, "superadmin")
    root = await login_ok(client, "superadmin")

    response = await client.get(
        "/audit/events", params={"category": "billing"}, headers=bearer(root["access_token"])
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
