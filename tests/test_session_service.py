from __future__ import annotations

import pytest

from minicrud.core.errors import Unauthorized
from minicrud.services.auth_service import User
from minicrud.services.session_service import SessionContext, SessionIdentity, SessionManager


@pytest.fixture()
def manager():
    return SessionManager(ttl_seconds=3600)


def test_establish_and_require(manager):
    token = manager.establish(User(display_name="Ana", email="ana@example.com"))

    identity = manager.require(SessionContext(token=token))

    assert identity == SessionIdentity(display_name="Ana", email="ana@example.com")
    assert identity.as_dict() == {"display_name": "Ana", "email": "ana@example.com"}


def test_tokens_are_unique_per_session(manager):
    user = User(display_name="Ana", email="ana@example.com")
    assert manager.establish(user) != manager.establish(user)


@pytest.mark.parametrize("context", [None, SessionContext(), SessionContext(token="forged")])
def test_require_without_session_is_unauthorized(manager, context):
    assert manager.current(context) is None
    with pytest.raises(Unauthorized):
        manager.require(context)


def test_destroy_is_idempotent(manager):
    context = SessionContext(token=manager.establish(User(display_name="Ana", email="ana@example.com")))

    manager.destroy(context)
    manager.destroy(context)
    manager.destroy(SessionContext())
    manager.destroy(None)

    assert manager.current(context) is None


def test_expired_sessions_are_dropped(manager, monkeypatch):
    import minicrud.services.session_service as session_service

    clock = [1000.0]
    monkeypatch.setattr(session_service.time, "time", lambda: clock[0])
    context = SessionContext(token=manager.establish(User(display_name="Ana", email="ana@example.com")))
    stale = SessionContext(token=manager.establish(User(display_name="Bea", email="bea@example.com")))

    clock[0] += 3599
    assert manager.current(context) is not None

    clock[0] += 2
    assert manager.purge_expired() == 2
    assert manager.current(context) is None
    assert manager.current(stale) is None


def test_establish_evicts_abandoned_expired_tokens(manager, monkeypatch):
    import minicrud.services.session_service as session_service

    clock = [1000.0]
    monkeypatch.setattr(session_service.time, "time", lambda: clock[0])
    user = User(display_name="Ana", email="ana@example.com")
    for _ in range(5):
        manager.establish(user)

    clock[0] += 3601
    fresh = SessionContext(token=manager.establish(user))

    assert list(manager._sessions) == [fresh.token]
    assert manager.require(fresh).email == "ana@example.com"
