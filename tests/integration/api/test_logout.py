from datetime import timedelta
from uuid import UUID

import pytest
from httpx import AsyncClient

from src.domain.base import utcnow
from src.domain.entities import Account
from tests.utils.api_helpers import bearer, create_tenant, login_ok, register


@pytest.mark.asyncio
async def test_logout_revokes_current_session(client: AsyncClient):
    """
    Given a cashier logged in on two devices
    When they log out on one
    Then that device's tokens stop working immediately
    And the other device is unaffected
    """
    tenant = await create_tenant(client)
    await register(client, "cashier", tenant["id"])
    first = await login_ok(client, "cashier")
    second = await login_ok(client, "cashier")

    response = await client.post("/auth/logout", headers=bearer(first["access_token"]))

    assert response.status_code == 200
    assert response.json()["status"] == "logged_out"
    assert response.json()["revoked_count"] == 1

    assert (await client.get("/me", headers=bearer(first["access_token"]))).status_code == 401
    refresh = await client.post("/auth/refresh", json={"refresh_token": first["refresh_token"]})
    assert refresh.status_code == 401
    assert (await client.get("/me", headers=bearer(second["access_token"]))).status_code == 200


@pytest.mark.asyncio
async def test_logout_twice_succeeds(client: AsyncClient):
    tenant = await create_tenant(client)
    await register(client, "cashier", tenant["id"])
    tokens = await login_ok(client, "cashier")

    await client.post("/auth/logout", headers=bearer(tokens["access_token"]))
    again = await client.post("/auth/logout", headers=bearer(tokens["access_token"]))

    assert again.status_code == 200
    assert again.json()["revoked_count"] == 0


@pytest.mark.asyncio
async def test_logout_without_any_token_still_succeeds(client: AsyncClient):
    response = await client.post("/auth/logout")

    assert response.status_code == 200
    assert response.json()["revoked_count"] == 0


@pytest.mark.asyncio
async def test_logout_with_expired_access_token(client: AsyncClient, db_session, token_issuer):
    """
    Given a cashier whose access token lapsed hours ago
    When they log out with it and their refresh token
    Then logout succeeds and the refresh token is dead
    """
    tenant = await create_tenant(client)
    cashier = await register(client, "cashier", tenant["id"])
    tokens = await login_ok(client, "cashier")

    account = await db_session.get(Account, UUID(cashier["account_id"]))
    expired = token_issuer.issue_access_token(
        account, account.tenant_id, [], UUID(tokens["session_id"]), now=utcnow() - timedelta(hours=3)
    )
    assert (await client.get("/me", headers=bearer(expired.token))).status_code == 401

    response = await client.post(
        "/auth/logout",
        json={"refresh_token": tokens["refresh_token"]},
        headers=bearer(expired.token),
    )

    assert response.status_code == 200
    assert response.json()["revoked_count"] == 1
    refresh = await client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refresh.status_code == 401


@pytest.mark.asyncio
async def test_logout_with_refresh_token_only(client: AsyncClient):
    tenant = await create_tenant(client)
    await register(client, "cashier", tenant["id"])
    tokens = await login_ok(client, "cashier")

    response = await client.post("/auth/logout", json={"refresh_token": tokens["refresh_token"]})

    assert response.status_code == 200
    assert response.json()["revoked_count"] == 1
    assert (await client.get("/me", headers=bearer(tokens["access_token"]))).status_code == 401


@pytest.mark.asyncio
async def test_logout_with_forged_token_revokes_nothing(client: AsyncClient):
    tenant = await create_tenant(client)
    await register(client, "cashier", tenant["id"])
    tokens = await login_ok(client, "cashier")

    response = await client.post("/auth/logout", headers=bearer(tokens["access_token"] + "x"))

    assert response.status_code == 200
    assert response.json()["revoked_count"] == 0
    assert (await client.get("/me", headers=bearer(tokens["access_token"]))).status_code == 200
