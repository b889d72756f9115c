from uuid import uuid4

import pytest

from src.app.use_cases.sessions import RevokeSessionsUseCase
from src.domain.entities import AuditAction, SystemRole
from tests.utils.factories import make_account, make_principal, make_session


@pytest.fixture
def tenant_id():
    return uuid4()


@pytest.mark.asyncio
async def test_revoke_own_session(mock_uow, tenant_id):
    cashier = make_account(tenant_id=tenant_id)
    session = make_session(cashier.id, tenant_id=tenant_id)
    mock_uow.sessions.get_by_id.return_value = session
    mock_uow.accounts.get_by_id.return_value = cashier
    mock_uow.sessions.revoke_by_id.return_value = True

    result = await RevokeSessionsUseCase(mock_uow).revoke_specific_session(
        session.id, make_principal(cashier)
    )

    assert result.is_ok()
    assert result.value.revoked_count == 1
    event = mock_uow.audit_events.create.await_args.args[0]
    assert event.action == AuditAction.revoked
    assert event.subject_account_id == cashier.id
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_revoke_already_revoked_session_counts_zero(mock_uow, tenant_id):
    cashier = make_account(tenant_id=tenant_id)
    mock_uow.sessions.get_by_id.return_value = make_session(cashier.id)
    mock_uow.accounts.get_by_id.return_value = cashier
    mock_uow.sessions.revoke_by_id.return_value = False

    result = await RevokeSessionsUseCase(mock_uow).revoke_specific_session(
        uuid4(), make_principal(cashier)
    )

    assert result.value.revoked_count == 0
    mock_uow.audit_events.create.assert_not_called()


@pytest.mark.asyncio
async def test_unknown_session(mock_uow):
    mock_uow.sessions.get_by_id.return_value = None

    result = await RevokeSessionsUseCase(mock_uow).revoke_specific_session(
        uuid4(), make_principal(make_account())
    )

    assert result.error.code == "NOT_FOUND"


@pytest.mark.parametrize(
    "actor_role, same_tenant, allowed",
    [
        (SystemRole.cashier, True, False),
        (SystemRole.pharmacist, True, False),
        (SystemRole.tenant_admin, True, True),
        (SystemRole.tenant_admin, False, False),
        (SystemRole.super_admin, False, True),
        (SystemRole.operations, True, False),
    ],
)
@pytest.mark.asyncio
async def test_revoke_other_accounts_sessions(mock_uow, tenant_id, actor_role, same_tenant, allowed):
    target = make_account(tenant_id=tenant_id)
    actor_tenant = tenant_id if same_tenant else uuid4()
    if actor_role in (SystemRole.super_admin, SystemRole.operations):
        actor_tenant = None
    actor = make_account(role=actor_role, tenant_id=actor_tenant, email="actor@sunrisepharmacy.com")
    mock_uow.accounts.get_by_id.return_value = target
    mock_uow.sessions.revoke_all_by_account.return_value = 3

    result = await RevokeSessionsUseCase(mock_uow).revoke_all_sessions(target.id, make_principal(actor))

    if allowed:
        assert result.is_ok()
        assert result.value.revoked_count == 3
        assert result.value.target_account_id == str(target.id)
    else:
        assert result.error.code == "INSUFFICIENT_PERMISSION"
        mock_uow.sessions.revoke_all_by_account.assert_not_called()


@pytest.mark.asyncio
async def test_revoke_all_except_current_keeps_caller_session(mock_uow):
    cashier = make_account()
    current = uuid4()
    mock_uow.sessions.revoke_all_by_account.return_value = 2

    result = await RevokeSessionsUseCase(mock_uow).revoke_all_except_current(
        make_principal(cashier, session_id=current)
    )

    assert result.value.revoked_count == 2
    assert result.value.kept_session_id == str(current)
    _, kwargs = mock_uow.sessions.revoke_all_by_account.await_args
    assert kwargs["keep_session_id"] == current


@pytest.mark.asyncio
async def test_platform_logout_requires_revoke_all(mock_uow):
    tenant_admin = make_account(role=SystemRole.tenant_admin, tenant_id=uuid4())

    result = await RevokeSessionsUseCase(mock_uow).logout_all(make_principal(tenant_admin))

    assert result.error.code == "INSUFFICIENT_PERMISSION"
    mock_uow.sessions.revoke_all.assert_not_called()
    mock_uow.__aenter__.assert_not_called()


@pytest.mark.asyncio
async def test_platform_logout(mock_uow):
    superadmin = make_account(role=SystemRole.super_admin)
    mock_uow.sessions.revoke_all.return_value = 42

    result = await RevokeSessionsUseCase(mock_uow).logout_all(make_principal(superadmin))

    assert result.value.revoked_count == 42
    event = mock_uow.audit_events.create.await_args.args[0]
    assert event.event_metadata == {"scope": "all", "revoked_count": 42}
