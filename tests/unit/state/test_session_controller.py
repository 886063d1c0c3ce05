import asyncio
import gc

import pytest
import requests

from auth_template.api import auth_client
from auth_template.api.errors import ApiError, UnauthorizedError
from auth_template.api.schemas import AuthUser, LogInResponse, MessageResponse
from auth_template.state.notifications import NotificationCenter, NotificationType
from auth_template.state.session import SessionController


@pytest.fixture
def user(user_payload):
    return AuthUser.model_validate(user_payload)


@pytest.fixture
def session():
    return SessionController(client=object())


def _patch_current_user(monkeypatch, outcome, release=None):
    """Replace ``get_current_user`` with a counting fake."""
    calls = []

    async def fake_get_current_user(*, client):
        calls.append(client)
        if release is not None:
            await release.wait()
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(auth_client, "get_current_user", fake_get_current_user)
    return calls


@pytest.mark.asyncio
async def test_refresh_sets_user(monkeypatch, session, user):
    _patch_current_user(monkeypatch, user)

    await session.refresh()

    assert session.user == user
    assert session.is_logged_in


@pytest.mark.asyncio
async def test_concurrent_refreshes_issue_one_request(monkeypatch, session, user):
    release = asyncio.Event()
    calls = _patch_current_user(monkeypatch, user, release)

    pending = [asyncio.ensure_future(session.refresh()) for _ in range(4)]
    await asyncio.sleep(0)
    release.set()
    await asyncio.gather(*pending)

    assert len(calls) == 1
    assert session.user == user


@pytest.mark.asyncio
async def test_failed_refresh_clears_user(monkeypatch, session, user):
    session.set_user(user)
    _patch_current_user(monkeypatch, UnauthorizedError("Missing token", status_code=401))

    await session.refresh()

    assert session.user is None
    assert not session.is_logged_in


@pytest.mark.asyncio
async def test_refresh_raises_only_when_asked(monkeypatch, session):
    release = asyncio.Event()
    failure = UnauthorizedError("Missing token", status_code=401)
    calls = _patch_current_user(monkeypatch, failure, release)

    quiet = asyncio.ensure_future(session.refresh())
    loud = asyncio.ensure_future(session.refresh(throw_on_error=True))
    await asyncio.sleep(0)
    release.set()

    await quiet
    with pytest.raises(UnauthorizedError) as exc_info:
        await loud

    assert exc_info.value is failure
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_refresh_after_settling_starts_new_request(monkeypatch, session, user):
    calls = _patch_current_user(monkeypatch, user)

    await session.refresh()
    await session.refresh()

    assert len(calls) == 2


@pytest.mark.asyncio
async def test_bootstrap_clears_loading_when_anonymous(monkeypatch, session):
    _patch_current_user(monkeypatch, UnauthorizedError("Missing token", status_code=401))

    assert session.is_loading

    await session.bootstrap()

    assert not session.is_loading
    assert session.user is None


@pytest.mark.asyncio
async def test_bootstrap_clears_loading_on_transport_error(monkeypatch, session):
    _patch_current_user(monkeypatch, requests.ConnectionError("offline"))

    await session.bootstrap()

    assert not session.is_loading
    assert session.user is None


def test_listeners_see_every_write(session, user):
    seen = []
    remove = session.add_listener(seen.append)

    session.set_user(user)
    session.set_user(None)
    remove()
    session.set_user(user)

    assert seen == [user, None]


@pytest.mark.asyncio
async def test_log_in_loads_user(monkeypatch, session, user):
    sent = {}

    async def fake_log_in(*, client, email, password, remember_me):
        sent.update(email=email, remember_me=remember_me)
        return LogInResponse(message="Logged in", user_id=user.id)

    monkeypatch.setattr(auth_client, "log_in", fake_log_in)
    _patch_current_user(monkeypatch, user)

    result = await session.log_in("ada@example.com", "secret", remember_me=True)

    assert result == user
    assert sent == {"email": "ada@example.com", "remember_me": True}


@pytest.mark.asyncio
async def test_log_in_raises_when_user_cannot_be_loaded(monkeypatch, session):
    async def fake_log_in(*, client, email, password, remember_me):
        return LogInResponse(message="Logged in", user_id="u-1")

    monkeypatch.setattr(auth_client, "log_in", fake_log_in)
    _patch_current_user(monkeypatch, ApiError("boom", status_code=500))

    with pytest.raises(ApiError):
        await session.log_in("ada@example.com", "secret")

    assert session.user is None


@pytest.mark.asyncio
async def test_log_out_success_clears_user(monkeypatch, session, user):
    async def fake_log_out(*, client):
        return MessageResponse(message="Logged out")

    monkeypatch.setattr(auth_client, "log_out", fake_log_out)
    session.set_user(user)
    notifications = NotificationCenter()

    assert await session.log_out(notifications) is True

    assert session.user is None
    [notification] = notifications.notifications
    assert notification.type is NotificationType.SUCCESS
    assert notification.message == "Logged out"


@pytest.mark.asyncio
async def test_log_out_failure_keeps_user(monkeypatch, session, user):
    async def fake_log_out(*, client):
        raise ApiError("Server error", status_code=500)

    monkeypatch.setattr(auth_client, "log_out", fake_log_out)
    session.set_user(user)
    notifications = NotificationCenter()

    assert await session.log_out(notifications) is False

    assert session.user == user
    [notification] = notifications.notifications
    assert notification.type is NotificationType.ERROR
    assert notification.title == "Logout failed"


@pytest.mark.asyncio
async def test_failure_after_waiters_cancelled_is_consumed(monkeypatch, session):
    loop = asyncio.get_running_loop()
    reported = []
    previous_handler = loop.get_exception_handler()
    loop.set_exception_handler(lambda _loop, context: reported.append(context))

    release = asyncio.Event()
    _patch_current_user(monkeypatch, UnauthorizedError("Missing token", status_code=401), release)

    try:
        waiter = asyncio.ensure_future(session.refresh())
        await asyncio.sleep(0)
        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        release.set()
        for _ in range(5):
            await asyncio.sleep(0)
        gc.collect()
    finally:
        loop.set_exception_handler(previous_handler)

    assert session.user is None
    assert reported == []
