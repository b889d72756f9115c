import pytest
from unittest.mock import AsyncMock, MagicMock

REPOSITORIES = (
    "accounts",
    "tenants",
    "sessions",
    "impersonations",
    "roles",
    "permissions",
    "assignments",
    "audit_events",
)


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    savepoint = MagicMock()
    savepoint.__aenter__ = AsyncMock(return_value=savepoint)
    savepoint.__aexit__ = AsyncMock(return_value=False)
    uow.savepoint = MagicMock(return_value=savepoint)

    # Every repository method is awaitable
    for name in REPOSITORIES:
        setattr(uow, name, AsyncMock())

    # Writes hand back what they were given, like the SQLModel repositories
    for repo, method in (
        ("sessions", "create"),
        ("accounts", "create"),
        ("accounts", "update"),
        ("impersonations", "create"),
        ("impersonations", "update"),
        ("audit_events", "create"),
        ("tenants", "create"),
        ("tenants", "update"),
        ("roles", "create"),
        ("roles", "update"),
        ("permissions", "create"),
        ("assignments", "save_account_role"),
        ("assignments", "save_tenant_grant"),
    ):
        getattr(getattr(uow, repo), method).side_effect = lambda obj: obj

    uow.accounts.lock.return_value = True
    uow.sessions.count_active.return_value = 0
    uow.sessions.list_idle_candidates.return_value = []
    uow.accounts.shortest_inactivity_timeout.return_value = None
    uow.tenants.get_by_license_key.return_value = None
    uow.assignments.active_role_ids.return_value = set()
    uow.permissions.names_for_roles.return_value = set()
    return uow


@pytest.fixture
def credentials():
    from src.app.services.credentials import CredentialVerifier

    return CredentialVerifier(rounds=4)


@pytest.fixture
def token_issuer():
    from src.app.services.token_issuer import TokenIssuer, TokenSettings

    return TokenIssuer(TokenSettings(secret="unit-test-secret", issuer="pos-auth", audience="pos-api"))


@pytest.fixture
def session_settings():
    from src.app.services.session_registry import SessionSettings

    return SessionSettings(max_devices=2)
