from uuid import uuid4

import pytest

from src.app.services.permission_resolver import PermissionResolver


@pytest.mark.asyncio
async def test_no_assignments_resolves_to_empty_set(mock_uow):
    mock_uow.assignments.active_role_ids.return_value = set()

    permissions = await PermissionResolver(mock_uow).resolve(uuid4(), uuid4())

    assert permissions == frozenset()
    mock_uow.permissions.names_for_roles.assert_not_called()


@pytest.mark.asyncio
async def test_union_of_roles_is_deduplicated(mock_uow):
    account_id, tenant_id = uuid4(), uuid4()
    role_ids = {uuid4(), uuid4()}
    mock_uow.assignments.active_role_ids.return_value = role_ids
    mock_uow.permissions.names_for_roles.return_value = {"sales.view", "inventory.view"}

    permissions = await PermissionResolver(mock_uow).resolve(account_id, tenant_id)

    assert permissions == frozenset({"sales.view", "inventory.view"})
    mock_uow.assignments.active_role_ids.assert_awaited_once_with(account_id, tenant_id)
    mock_uow.permissions.names_for_roles.assert_awaited_once_with(role_ids)


@pytest.mark.asyncio
async def test_resolution_is_idempotent(mock_uow):
    mock_uow.assignments.active_role_ids.return_value = {uuid4()}
    mock_uow.permissions.names_for_roles.return_value = {"sales.view"}
    resolver = PermissionResolver(mock_uow)
    account_id = uuid4()

    assert await resolver.resolve(account_id, None) == await resolver.resolve(account_id, None)
