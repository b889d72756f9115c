from uuid import uuid4

import pytest

from src.app.use_cases.admin import RegisterAccountUseCase
from src.domain.entities import Role, SystemRole
from tests.utils.factories import make_account, make_tenant


@pytest.fixture
def use_case(mock_uow, credentials):
    mock_uow.accounts.get_by_email.return_value = None
    mock_uow.roles.get_by_name.side_effect = lambda name, tenant_id=None: Role(
        name=name, is_system=True, is_global=True
    )
    return RegisterAccountUseCase(mock_uow, credentials)


@pytest.mark.asyncio
async def test_register_tenant_account(use_case, mock_uow, credentials):
    tenant = make_tenant()
    mock_uow.tenants.get_by_id.return_value = tenant

    result = await use_case.execute(
        "New.Cashier@SunrisePharmacy.COM", "CashPass123!", "cashier", tenant_id=tenant.id, full_name="New Cashier"
    )

    assert result.is_ok()
    assert result.value.email == "new.cashier@sunrisepharmacy.com"
    assert result.value.tenant_id == str(tenant.id)

    account = mock_uow.accounts.create.await_args.args[0]
    assert account.role == SystemRole.cashier
    assert account.password_hash != "CashPass123!"
    assert credentials.verify(account.password_hash, "CashPass123!")

    assignment = mock_uow.assignments.save_account_role.await_args.args[0]
    assert assignment.account_id == account.id
    assert assignment.tenant_id == tenant.id
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_register_platform_account(use_case, mock_uow):
    result = await use_case.execute("ops2@posplatform.io", "OpsPass123!", "operations")

    assert result.value.tenant_id is None
    mock_uow.tenants.get_by_id.assert_not_called()


@pytest.mark.parametrize(
    "role, with_tenant, max_devices",
    [
        ("owner", True, None),
        ("super_admin", True, None),
        ("cashier", False, None),
        ("cashier", True, 0),
    ],
)
@pytest.mark.asyncio
async def test_invalid_registrations(use_case, mock_uow, role, with_tenant, max_devices):
    result = await use_case.execute(
        "x@sunrisepharmacy.com",
        "Password123!",
        role,
        tenant_id=uuid4() if with_tenant else None,
        max_devices=max_devices,
    )

    assert result.error.code == "VALIDATION_ERROR"
    mock_uow.accounts.create.assert_not_called()


@pytest.mark.asyncio
async def test_duplicate_email_any_case(use_case, mock_uow):
    mock_uow.tenants.get_by_id.return_value = make_tenant()
    mock_uow.accounts.get_by_email.return_value = make_account()

    result = await use_case.execute("CASHIER@sunrisepharmacy.com", "Password123!", "cashier", tenant_id=uuid4())

    assert result.error.code == "CONFLICT"
    mock_uow.accounts.get_by_email.assert_awaited_once_with("cashier@sunrisepharmacy.com")


@pytest.mark.asyncio
async def test_unknown_tenant(use_case, mock_uow):
    mock_uow.tenants.get_by_id.return_value = None

    result = await use_case.execute("x@sunrisepharmacy.com", "Password123!", "pharmacist", tenant_id=uuid4())

    assert result.error.code == "NOT_FOUND"
