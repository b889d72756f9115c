from datetime import timedelta
from uuid import uuid4

import pytest

from src.app.services.session_registry import SessionRegistry, SessionSettings
from src.app.services.token_issuer import hash_refresh_token
from src.domain.base import utcnow
from src.domain.entities import SessionStatus
from tests.utils.factories import desktop_client, make_account, make_session


@pytest.mark.asyncio
async def test_create_session_under_limit(mock_uow, token_issuer, session_settings):
    account = make_account()
    mock_uow.sessions.count_active.return_value = 1

    registry = SessionRegistry(mock_uow, token_issuer, session_settings)
    result = await registry.create_session(account, desktop_client())

    assert result.is_ok()
    session, refresh_token = result.value
    assert session.account_id == account.id
    assert session.status == SessionStatus.active
    assert session.refresh_token_hash == hash_refresh_token(refresh_token)
    assert session.device_info == "Desktop"
    assert session.browser == "Chrome"
    assert session.ip_address == "203.0.113.7"
    assert session.expires_at - session.created_at == session_settings.refresh_ttl
    mock_uow.sessions.create.assert_awaited_once()


@pytest.mark.asyncio
async def test_lock_is_taken_before_counting(mock_uow, token_issuer, session_settings):
    calls = []
    mock_uow.accounts.lock.side_effect = lambda account_id: calls.append("lock") or True
    mock_uow.sessions.count_active.side_effect = (
        lambda account_id, now, active_since=None: calls.append("count") or 0
    )

    registry = SessionRegistry(mock_uow, token_issuer, session_settings)
    await registry.create_session(make_account(), desktop_client())

    assert calls == ["lock", "count"]


@pytest.mark.asyncio
async def test_device_limit_exceeded_carries_counts(mock_uow, token_issuer, session_settings):
    mock_uow.sessions.count_active.return_value = 2

    registry = SessionRegistry(mock_uow, token_issuer, session_settings)
    result = await registry.create_session(make_account(), desktop_client())

    assert result.is_err()
    assert result.error.code == "DEVICE_LIMIT_EXCEEDED"
    assert result.error.details == {"current_devices": 2, "max_devices": 2}
    mock_uow.sessions.create.assert_not_called()


@pytest.mark.asyncio
async def test_account_override_beats_deployment_default(mock_uow, token_issuer):
    registry = SessionRegistry(mock_uow, token_issuer, SessionSettings(max_devices=5))

    assert registry.device_limit(make_account(max_devices=1)) == 1
    assert registry.device_limit(make_account()) == 5

    mock_uow.sessions.count_active.return_value = 1
    result = await registry.create_session(make_account(max_devices=1), desktop_client())
    assert result.error.details["max_devices"] == 1


@pytest.mark.asyncio
async def test_missing_account_row(mock_uow, token_issuer, session_settings):
    mock_uow.accounts.lock.return_value = False

    registry = SessionRegistry(mock_uow, token_issuer, session_settings)
    result = await registry.create_session(make_account(), desktop_client())

    assert result.error.code == "NOT_FOUND"


@pytest.mark.asyncio
async def test_rotate_returns_none_when_swap_lost(mock_uow, token_issuer, session_settings):
    account = make_account()
    registry = SessionRegistry(mock_uow, token_issuer, session_settings)
    created = await registry.create_session(account, desktop_client())
    session, refresh_token = created.value

    mock_uow.sessions.rotate_refresh_token.return_value = False
    assert await registry.rotate(session, refresh_token) is None

    mock_uow.sessions.rotate_refresh_token.return_value = True
    new_token = await registry.rotate(session, refresh_token)
    assert new_token and new_token != refresh_token
    kwargs = mock_uow.sessions.rotate_refresh_token.await_args.kwargs
    assert kwargs["old_hash"] == hash_refresh_token(refresh_token)
    assert kwargs["new_hash"] == hash_refresh_token(new_token)


@pytest.mark.asyncio
async def test_revoke_all_keeps_current_session(mock_uow):
    account_id, keep = uuid4(), uuid4()
    mock_uow.sessions.revoke_all_by_account.return_value = 3

    count = await SessionRegistry(mock_uow).revoke_all(account_id, keep_session_id=keep)

    assert count == 3
    assert mock_uow.sessions.revoke_all_by_account.await_args.kwargs["keep_session_id"] == keep


@pytest.mark.asyncio
async def test_sweep_marks_stale_sessions(mock_uow):
    account = make_account()
    stale = [make_session(account.id) for _ in range(2)]
    mock_uow.sessions.list_stale.return_value = stale

    swept = await SessionRegistry(mock_uow).sweep_expired()

    assert swept == stale
    mock_uow.sessions.mark_expired.assert_awaited_once_with([s.id for s in stale])


@pytest.mark.asyncio
async def test_sweep_with_nothing_stale(mock_uow):
    mock_uow.sessions.list_stale.return_value = []

    assert await SessionRegistry(mock_uow).sweep_expired() == []
    mock_uow.sessions.mark_expired.assert_not_called()


def test_idle_timeout_account_override_beats_deployment_default(mock_uow):
    registry = SessionRegistry(mock_uow, settings=SessionSettings(inactivity_timeout=timedelta(minutes=30)))

    assert registry.idle_timeout(make_account(inactivity_timeout_minutes=5)) == timedelta(minutes=5)
    assert registry.idle_timeout(make_account()) == timedelta(minutes=30)


@pytest.mark.asyncio
async def test_idle_sessions_do_not_count_toward_device_limit(mock_uow, token_issuer, session_settings):
    registry = SessionRegistry(mock_uow, token_issuer, session_settings)
    now = utcnow()

    await registry.create_session(make_account(), desktop_client(), now=now)

    kwargs = mock_uow.sessions.count_active.await_args.kwargs
    assert kwargs["active_since"] == now - session_settings.inactivity_timeout


@pytest.mark.parametrize("idle_for, writes", [(timedelta(seconds=10), False), (timedelta(minutes=5), True)])
@pytest.mark.asyncio
async def test_touch_records_use_at_most_once_a_minute(mock_uow, idle_for, writes):
    session = make_session(uuid4(), idle_for=idle_for)
    now = utcnow()

    touched = await SessionRegistry(mock_uow).touch(session, now)

    assert touched is writes
    assert mock_uow.sessions.touch.await_count == (1 if writes else 0)
    if writes:
        assert session.last_used_at == now


@pytest.mark.asyncio
async def test_sweep_idle_applies_each_accounts_timeout(mock_uow):
    strict = make_account(inactivity_timeout_minutes=5)
    relaxed = make_account()
    strict_session = make_session(strict.id, idle_for=timedelta(minutes=10))
    relaxed_session = make_session(relaxed.id, idle_for=timedelta(minutes=10))
    mock_uow.accounts.shortest_inactivity_timeout.return_value = 5
    mock_uow.sessions.list_idle_candidates.return_value = [
        (strict_session, strict),
        (relaxed_session, relaxed),
    ]
    now = utcnow()

    swept = await SessionRegistry(mock_uow).sweep_idle(now)

    assert swept == [strict_session]
    assert mock_uow.sessions.list_idle_candidates.await_args.kwargs["since"] == now - timedelta(minutes=5)
    mock_uow.sessions.mark_expired.assert_awaited_once_with([strict_session.id])
