import pytest
from httpx import AsyncClient

from tests.utils.api_helpers import ADMIN_HEADERS, bearer, create_tenant, login, login_ok, register


@pytest.mark.asyncio
async def test_suspend_and_restore_tenant(client: AsyncClient):
    """
    Given a tenant with logged-in staff
    When billing suspends it
    Then every session of the tenant is revoked and nobody can log in
    And after restore staff can log in again but old sessions stay revoked
    """
    tenant = await create_tenant(client)
    other = await create_tenant(client, "other_tenant")
    await register(client, "cashier", tenant["id"])
    await register(client, "tenant_admin", tenant["id"])
    await register(client, "pharmacist", other["id"])
    cashier = await login_ok(client, "cashier")
    await login_ok(client, "tenant_admin")
    outsider = await login_ok(client, "pharmacist")

    response = await client.post(f"/admin/tenants/{tenant['id']}/suspend", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.json()["status"] == "suspended"
    assert response.json()["sessions_revoked"] == 2
    assert (await client.get("/me", headers=bearer(cashier["access_token"]))).status_code == 401
    assert (await client.get("/me", headers=bearer(outsider["access_token"]))).status_code == 200
    assert (await login(client, "cashier")).json()["error"]["code"] == "ACCOUNT_INACTIVE"

    restored = await client.post(f"/admin/tenants/{tenant['id']}/restore", headers=ADMIN_HEADERS)

    assert restored.status_code == 200
    assert restored.json()["status"] == "active"
    assert restored.json()["previous_status"] == "suspended"
    assert (await login(client, "cashier")).status_code == 200
    stale = await client.post("/auth/refresh", json={"refresh_token": cashier["refresh_token"]})
    assert stale.status_code == 401


@pytest.mark.asyncio
async def test_suspend_twice_revokes_nothing_more(client: AsyncClient):
    tenant = await create_tenant(client)

    await client.post(f"/admin/tenants/{tenant['id']}/suspend", headers=ADMIN_HEADERS)
    again = await client.post(f"/admin/tenants/{tenant['id']}/suspend", headers=ADMIN_HEADERS)

    assert again.status_code == 200
    assert again.json()["sessions_revoked"] == 0


@pytest.mark.asyncio
async def test_suspend_unknown_tenant(client: AsyncClient):
    response = await client.post(
        "/admin/tenants/00000000-0000-0000-0000-000000000000/suspend", headers=ADMIN_HEADERS
    )

    assert response.status_code == 404


@pytest.mark.parametrize(
    "headers, code",
    [({}, "UNAUTHORIZED"), ({"X-Admin-API-Key": "wrong-key"}, "INVALID_API_KEY")],
)
@pytest.mark.asyncio
async def test_admin_key_required(client: AsyncClient, headers, code):
    response = await client.get("/admin/tenants", headers=headers)

    assert response.status_code == 401
    assert response.json()["error"]["code"] == code


@pytest.mark.asyncio
async def test_list_tenants_by_status(client: AsyncClient):
    tenant = await create_tenant(client)
    await create_tenant(client, "other_tenant")
    await client.post(f"/admin/tenants/{tenant['id']}/suspend", headers=ADMIN_HEADERS)

    response = await client.get("/admin/tenants", params={"status": "suspended"}, headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert [t["name"] for t in response.json()["tenants"]] == ["Sunrise Pharmacy"]


@pytest.mark.asyncio
async def test_license_key_belongs_to_one_tenant(client: AsyncClient, test_data):
    await create_tenant(client)
    duplicate = test_data.get_copy("other_tenant")
    duplicate["license_key"] = test_data.get("tenant")["license_key"]

    response = await client.post("/admin/tenants", json=duplicate, headers=ADMIN_HEADERS)

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"
