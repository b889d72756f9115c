"""HTTP helpers shared by the integration tests"""

from typing import Dict, Optional

from httpx import AsyncClient

from tests.fixtures.json_loader import FixtureData

ADMIN_HEADERS = {"X-Admin-API-Key": "test-admin-key-12345"}


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def create_tenant(client: AsyncClient, key: str = "tenant") -> Dict:
    response = await client.post("/admin/tenants", json=FixtureData.get_copy(key), headers=ADMIN_HEADERS)
    assert response.status_code == 201, response.text
    return response.json()


async def register(client: AsyncClient, key: str, tenant_id: Optional[str] = None, **overrides) -> Dict:
    """Register the account described under `key` in test_data.json"""
    payload = FixtureData.get_copy(key)
    payload["tenant_id"] = tenant_id
    payload.update(overrides)
    response = await client.post("/admin/accounts", json=payload, headers=ADMIN_HEADERS)
    assert response.status_code == 201, response.text
    return response.json()


async def login(client: AsyncClient, key: str, user_agent: Optional[str] = None):
    headers = {"User-Agent": user_agent} if user_agent else {}
    return await client.post("/auth/login", json=FixtureData.credentials(key), headers=headers)


async def login_ok(client: AsyncClient, key: str, user_agent: Optional[str] = None) -> Dict:
    response = await login(client, key, user_agent)
    assert response.status_code == 200, response.text
    return response.json()
