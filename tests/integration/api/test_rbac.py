import pytest
import pytest_asyncio
from httpx import AsyncClient

from tests.utils.api_helpers import bearer, create_tenant, login_ok, register


@pytest_asyncio.fixture
async def root_headers(client: AsyncClient):
    await register(client, "superadmin")
    tokens = await login_ok(client, "superadmin")
    return bearer(tokens["access_token"])


async def _role_id(client: AsyncClient, headers, name: str) -> str:
    roles = (await client.get("/rbac/roles", headers=headers)).json()
    return next(r["id"] for r in roles if r["name"] == name)


@pytest.mark.asyncio
async def test_system_roles_are_seeded(client: AsyncClient, root_headers):
    response = await client.get("/rbac/roles", headers=root_headers)

    assert response.status_code == 200
    roles = {r["name"]: r for r in response.json()}
    assert {"super_admin", "operations", "tenant_admin", "pharmacist", "cashier"} <= set(roles)
    assert all(roles[name]["is_system"] for name in ("super_admin", "cashier"))
    assert "sales.create" in roles["cashier"]["permissions"]
    assert "sales.refund" not in roles["cashier"]["permissions"]


@pytest.mark.parametrize(
    "method, suffix, body",
    [
        ("DELETE", "", None),
        ("PATCH", "", {"name": "Till Operator"}),
        ("PUT", "/permissions", {"permissions": []}),
    ],
)
@pytest.mark.asyncio
async def test_system_roles_are_immutable(client: AsyncClient, root_headers, method, suffix, body):
    cashier_role = await _role_id(client, root_headers, "cashier")

    response = await client.request(
        method, f"/rbac/roles/{cashier_role}{suffix}", json=body, headers=root_headers
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"


@pytest.mark.asyncio
async def test_custom_role_lifecycle(client: AsyncClient, root_headers):
    """
    Given a custom role granting refunds
    When it is assigned to a cashier
    Then the cashier's existing token sees the new permission
    And the role cannot be deleted until it is unassigned
    """
    tenant = await create_tenant(client)
    cashier = await register(client, "cashier", tenant["id"])
    cashier_tokens = await login_ok(client, "cashier")
    me_before = await client.get("/me", headers=bearer(cashier_tokens["access_token"]))
    assert "sales.refund" not in me_before.json()["permissions"]

    created = await client.post(
        "/rbac/roles",
        json={"name": "Shift Lead", "permissions": ["sales.refund"]},
        headers=root_headers,
    )
    assert created.status_code == 201
    role_id = created.json()["id"]

    duplicate = await client.post("/rbac/roles", json={"name": "shift lead"}, headers=root_headers)
    assert duplicate.status_code == 409

    assigned = await client.post(
        f"/rbac/accounts/{cashier['account_id']}/roles",
        json={"role_id": role_id, "tenant_id": tenant["id"]},
        headers=root_headers,
    )
    assert assigned.status_code == 201

    me_after = await client.get("/me", headers=bearer(cashier_tokens["access_token"]))
    assert "sales.refund" in me_after.json()["permissions"]

    in_use = await client.delete(f"/rbac/roles/{role_id}", headers=root_headers)
    assert in_use.status_code == 409

    unassigned = await client.delete(
        f"/rbac/accounts/{cashier['account_id']}/roles/{role_id}",
        params={"tenant_id": tenant["id"]},
        headers=root_headers,
    )
    assert unassigned.status_code == 200
    assert unassigned.json()["is_active"] is False

    deleted = await client.delete(f"/rbac/roles/{role_id}", headers=root_headers)
    assert deleted.status_code == 200


@pytest.mark.asyncio
async def test_resolution_is_repeatable(client: AsyncClient, root_headers):
    tenant = await create_tenant(client)
    pharmacist = await register(client, "pharmacist", tenant["id"])
    url = f"/rbac/accounts/{pharmacist['account_id']}/permissions"

    first = await client.get(url, params={"tenant_id": tenant["id"]}, headers=root_headers)
    second = await client.get(url, params={"tenant_id": tenant["id"]}, headers=root_headers)

    assert first.status_code == 200
    assert first.json() == second.json()
    assert "prescription.fill" in first.json()["permissions"]


@pytest.mark.asyncio
async def test_tenant_grant_reaches_every_account(client: AsyncClient, root_headers):
    tenant = await create_tenant(client)
    cashier = await register(client, "cashier", tenant["id"])
    role = (
        await client.post(
            "/rbac/roles", json={"name": "Refunds", "permissions": ["sales.refund"]}, headers=root_headers
        )
    ).json()

    granted = await client.post(
        f"/rbac/tenants/{tenant['id']}/roles", json={"role_id": role["id"]}, headers=root_headers
    )
    assert granted.status_code == 201

    resolved = await client.get(
        f"/rbac/accounts/{cashier['account_id']}/permissions",
        params={"tenant_id": tenant["id"]},
        headers=root_headers,
    )
    assert "sales.refund" in resolved.json()["permissions"]

    withdrawn = await client.delete(f"/rbac/tenants/{tenant['id']}/roles/{role['id']}", headers=root_headers)
    assert withdrawn.status_code == 200
    resolved = await client.get(
        f"/rbac/accounts/{cashier['account_id']}/permissions",
        params={"tenant_id": tenant["id"]},
        headers=root_headers,
    )
    assert "sales.refund" not in resolved.json()["permissions"]


@pytest.mark.asyncio
async def test_custom_permissions(client: AsyncClient, root_headers):
    created = await client.post("/rbac/permissions", json={"name": "sales.void"}, headers=root_headers)
    assert created.status_code == 201

    duplicate = await client.post("/rbac/permissions", json={"name": "sales.void"}, headers=root_headers)
    assert duplicate.status_code == 409

    permissions = (await client.get("/rbac/permissions", headers=root_headers)).json()
    system = next(p for p in permissions if p["name"] == "sales.view")
    refused = await client.delete(f"/rbac/permissions/{system['id']}", headers=root_headers)
    assert refused.status_code == 409

    deleted = await client.delete(f"/rbac/permissions/{created.json()['id']}", headers=root_headers)
    assert deleted.status_code == 200


@pytest.mark.asyncio
async def test_rbac_requires_roles_manage(client: AsyncClient):
    tenant = await create_tenant(client)
    await register(client, "tenant_admin", tenant["id"])
    owner = await login_ok(client, "tenant_admin")

    response = await client.get("/rbac/roles", headers=bearer(owner["access_token"]))

    assert response.status_code == 403
