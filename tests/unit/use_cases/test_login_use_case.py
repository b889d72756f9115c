import threading
from uuid import uuid4

import pytest

from src.app.services.audit_logger import AUDIT_WRITE_FAILED
from src.app.repositories.audit_event_repository import AuditWriteError
from src.app.use_cases.auth.login_use_case import LoginUseCase
from src.domain.entities import AccountStatus, AuditAction, TenantStatus
from tests.utils.factories import desktop_client, make_account, make_tenant

PASSWORD = "SecurePass123!"


@pytest.fixture
def use_case(mock_uow, credentials, token_issuer, session_settings):
    return LoginUseCase(mock_uow, credentials, token_issuer, session_settings)


@pytest.fixture
def tenant(mock_uow):
    tenant = make_tenant()
    mock_uow.tenants.get_by_id.return_value = tenant
    return tenant


@pytest.fixture
def account(mock_uow, credentials, tenant):
    account = make_account(password_hash=credentials.hash(PASSWORD), tenant_id=tenant.id)
    mock_uow.accounts.get_by_email.return_value = account
    return account


@pytest.mark.asyncio
async def test_successful_login(use_case, mock_uow, account, token_issuer):
    """Valid credentials open a session and return a token pair"""
    role_id = uuid4()
    mock_uow.assignments.active_role_ids.return_value = {role_id}
    mock_uow.permissions.names_for_roles.return_value = {"sales.view", "dashboard.view"}

    result = await use_case.execute("Cashier@SunrisePharmacy.com", PASSWORD, desktop_client())

    assert result.is_ok()
    data = result.value
    assert data.token_type == "bearer"
    assert data.refresh_token
    assert data.permissions == ["dashboard.view", "sales.view"]
    assert data.account.email == account.email
    assert data.warnings == []

    claims = token_issuer.decode(data.access_token)
    assert claims.account_id == account.id
    assert str(claims.session_id) == data.session_id
    assert claims.tenant_id == account.tenant_id

    # Verify UnitOfWork calls
    mock_uow.accounts.get_by_email.assert_awaited_once_with("Cashier@SunrisePharmacy.com")
    mock_uow.accounts.lock.assert_awaited_once_with(account.id)
    mock_uow.sessions.create.assert_awaited_once()
    mock_uow.accounts.update.assert_awaited_once()
    assert account.last_login_at is not None
    event = mock_uow.audit_events.create.await_args.args[0]
    assert event.action == AuditAction.started
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_login_invalid_credentials_wrong_password(use_case, mock_uow, account):
    result = await use_case.execute(account.email, "WrongPassword!", desktop_client())

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"
    assert result.error.message == "Invalid email or password"

    # Verify no session created
    mock_uow.sessions.create.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_login_invalid_credentials_nonexistent_account(use_case, mock_uow, credentials):
    mock_uow.accounts.get_by_email.return_value = None
    burned = []
    original_burn = credentials.burn
    credentials.burn = lambda secret: burned.append(secret) or original_burn(secret)

    result = await use_case.execute("nobody@sunrisepharmacy.com", "SomePassword!", desktop_client())

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"
    assert result.error.message == "Invalid email or password"
    assert burned == ["SomePassword!"]
    mock_uow.sessions.create.assert_not_called()


@pytest.mark.asyncio
async def test_password_check_runs_off_the_event_loop(use_case, account, credentials):
    threads = []
    original_verify = credentials.verify
    credentials.verify = lambda *args: threads.append(threading.get_ident()) or original_verify(*args)

    await use_case.execute(account.email, PASSWORD, desktop_client())

    assert threads and threads[0] != threading.get_ident()


@pytest.mark.asyncio
async def test_inactive_account_only_revealed_after_password(use_case, mock_uow, account):
    account.status = AccountStatus.inactive

    wrong = await use_case.execute(account.email, "WrongPassword!", desktop_client())
    right = await use_case.execute(account.email, PASSWORD, desktop_client())

    assert wrong.error.code == "INVALID_CREDENTIALS"
    assert right.error.code == "ACCOUNT_INACTIVE"
    mock_uow.sessions.create.assert_not_called()


@pytest.mark.asyncio
async def test_suspended_tenant_blocks_login(use_case, mock_uow, account, tenant):
    tenant.status = TenantStatus.suspended

    result = await use_case.execute(account.email, PASSWORD, desktop_client())

    assert result.error.code == "ACCOUNT_INACTIVE"
    mock_uow.sessions.create.assert_not_called()


@pytest.mark.asyncio
async def test_device_limit_reached(use_case, mock_uow, account):
    mock_uow.sessions.count_active.return_value = 2

    result = await use_case.execute(account.email, PASSWORD, desktop_client())

    assert result.error.code == "DEVICE_LIMIT_EXCEEDED"
    assert result.error.details == {"current_devices": 2, "max_devices": 2}
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_audit_failure_still_logs_in(use_case, mock_uow, account):
    mock_uow.audit_events.create.side_effect = AuditWriteError("audit table locked")

    result = await use_case.execute(account.email, PASSWORD, desktop_client())

    assert result.is_ok()
    assert result.value.warnings == [AUDIT_WRITE_FAILED]
    mock_uow.commit.assert_awaited_once()
