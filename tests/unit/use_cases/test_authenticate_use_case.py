from datetime import timedelta
from uuid import uuid4

import pytest

from src.app.use_cases.auth.authenticate_use_case import AuthenticateUseCase
from src.domain.entities import AccountStatus, ImpersonationStatus, SessionStatus, SystemRole
from tests.utils.factories import make_account, make_impersonation, make_session


@pytest.mark.asyncio
async def test_live_session_gives_principal_with_current_permissions(mock_uow, token_issuer):
    account = make_account(tenant_id=uuid4())
    session = make_session(account.id, tenant_id=account.tenant_id)
    mock_uow.accounts.get_by_id.return_value = account
    mock_uow.sessions.get_by_id.return_value = session
    mock_uow.assignments.active_role_ids.return_value = {uuid4()}
    mock_uow.permissions.names_for_roles.return_value = {"sales.view"}

    issued = token_issuer.issue_access_token(account, account.tenant_id, ["stale.permission"], session.id)
    result = await AuthenticateUseCase(mock_uow).execute(token_issuer.decode(issued.token))

    assert result.is_ok()
    principal = result.value
    assert principal.account_id == account.id
    assert principal.session_id == session.id
    assert principal.permissions == frozenset({"sales.view"})
    assert not principal.is_impersonation


@pytest.mark.asyncio
async def test_revoked_session_rejects_token(mock_uow, token_issuer):
    account = make_account()
    session = make_session(account.id, status=SessionStatus.revoked)
    mock_uow.accounts.get_by_id.return_value = account
    mock_uow.sessions.get_by_id.return_value = session

    claims = token_issuer.decode(token_issuer.issue_access_token(account, None, [], session.id).token)
    result = await AuthenticateUseCase(mock_uow).execute(claims)

    assert result.error.code == "INVALID_OR_EXPIRED_TOKEN"


@pytest.mark.asyncio
async def test_inactive_account(mock_uow, token_issuer):
    account = make_account(status=AccountStatus.inactive)
    mock_uow.accounts.get_by_id.return_value = account

    claims = token_issuer.decode(token_issuer.issue_access_token(account, None, [], uuid4()).token)
    result = await AuthenticateUseCase(mock_uow).execute(claims)

    assert result.error.code == "ACCOUNT_INACTIVE"


@pytest.mark.asyncio
async def test_live_impersonation_acts_as_tenant_admin(mock_uow, token_issuer):
    admin = make_account(role=SystemRole.super_admin)
    tenant_id = uuid4()
    impersonation = make_impersonation(admin.id, tenant_id)
    mock_uow.accounts.get_by_id.return_value = admin
    mock_uow.impersonations.get_by_id.return_value = impersonation

    issued = token_issuer.issue_impersonation_token(admin, tenant_id, impersonation.id, [])
    result = await AuthenticateUseCase(mock_uow).execute(token_issuer.decode(issued.token))

    principal = result.value
    assert principal.role == SystemRole.tenant_admin
    assert principal.tenant_id == tenant_id
    assert principal.impersonation_id == impersonation.id
    assert principal.has_permission("tenant.admin")
    assert not principal.has_permission("impersonate.tenant")


@pytest.mark.parametrize(
    "status, expires_in",
    [
        (ImpersonationStatus.ended, timedelta(hours=1)),
        (ImpersonationStatus.active, timedelta(seconds=-1)),
    ],
)
@pytest.mark.asyncio
async def test_ended_or_expired_impersonation_rejects_token(mock_uow, token_issuer, status, expires_in):
    admin = make_account(role=SystemRole.super_admin)
    impersonation = make_impersonation(admin.id, uuid4(), expires_in=expires_in, status=status)
    mock_uow.accounts.get_by_id.return_value = admin
    mock_uow.impersonations.get_by_id.return_value = impersonation

    issued = token_issuer.issue_impersonation_token(admin, impersonation.tenant_id, impersonation.id, [])
    result = await AuthenticateUseCase(mock_uow).execute(token_issuer.decode(issued.token))

    assert result.error.code == "INVALID_OR_EXPIRED_TOKEN"


@pytest.mark.asyncio
async def test_impersonation_row_of_another_admin(mock_uow, token_issuer):
    admin = make_account(role=SystemRole.super_admin)
    impersonation = make_impersonation(uuid4(), uuid4())
    mock_uow.accounts.get_by_id.return_value = admin
    mock_uow.impersonations.get_by_id.return_value = impersonation

    issued = token_issuer.issue_impersonation_token(admin, impersonation.tenant_id, impersonation.id, [])
    result = await AuthenticateUseCase(mock_uow).execute(token_issuer.decode(issued.token))

    assert result.error.code == "INVALID_OR_EXPIRED_TOKEN"


@pytest.mark.asyncio
async def test_session_idle_past_timeout_rejects_token(mock_uow, token_issuer, session_settings):
    account = make_account()
    session = make_session(account.id, idle_for=session_settings.inactivity_timeout + timedelta(minutes=1))
    mock_uow.accounts.get_by_id.return_value = account
    mock_uow.sessions.get_by_id.return_value = session

    claims = token_issuer.decode(token_issuer.issue_access_token(account, None, [], session.id).token)
    result = await AuthenticateUseCase(mock_uow, session_settings).execute(claims)

    assert result.error.code == "INVALID_OR_EXPIRED_TOKEN"
    mock_uow.sessions.touch.assert_not_called()


@pytest.mark.asyncio
async def test_account_idle_timeout_override_applies(mock_uow, token_issuer, session_settings):
    account = make_account(inactivity_timeout_minutes=5)
    session = make_session(account.id, idle_for=timedelta(minutes=10))
    mock_uow.accounts.get_by_id.return_value = account
    mock_uow.sessions.get_by_id.return_value = session

    claims = token_issuer.decode(token_issuer.issue_access_token(account, None, [], session.id).token)
    result = await AuthenticateUseCase(mock_uow, session_settings).execute(claims)

    assert result.error.code == "INVALID_OR_EXPIRED_TOKEN"


@pytest.mark.asyncio
async def test_request_counts_as_session_use(mock_uow, token_issuer, session_settings):
    account = make_account()
    session = make_session(account.id, idle_for=timedelta(minutes=10))
    previous_use = session.last_used_at
    mock_uow.accounts.get_by_id.return_value = account
    mock_uow.sessions.get_by_id.return_value = session

    claims = token_issuer.decode(token_issuer.issue_access_token(account, None, [], session.id).token)
    result = await AuthenticateUseCase(mock_uow, session_settings).execute(claims)

    assert result.is_ok()
    mock_uow.sessions.touch.assert_awaited_once()
    assert session.last_used_at > previous_use
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_recently_used_session_is_not_rewritten(mock_uow, token_issuer):
    account = make_account()
    session = make_session(account.id)
    mock_uow.accounts.get_by_id.return_value = account
    mock_uow.sessions.get_by_id.return_value = session

    claims = token_issuer.decode(token_issuer.issue_access_token(account, None, [], session.id).token)
    await AuthenticateUseCase(mock_uow).execute(claims)

    mock_uow.sessions.touch.assert_not_called()
    mock_uow.commit.assert_not_called()
