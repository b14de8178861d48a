# tests/unit/services/test_refresh_token_manager.py
from __future__ import annotations

import logging

import pytest

from authcore.services._shared.errors import ExpiredTokenError, InvalidTokenError
from authcore.services._shared.ports import FixedClock, InMemoryRefreshTokenStore
from authcore.services._shared.result import Err, Ok
from authcore.services.refresh_tokens.service import RefreshTokenManager
from authcore.services.tokens.hasher import OpaqueTokenHasher

WEEK = 7 * 24 * 3600


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(0)


@pytest.fixture()
def store() -> InMemoryRefreshTokenStore:
    return InMemoryRefreshTokenStore()


@pytest.fixture()
def manager(store, clock) -> RefreshTokenManager:
    """Manager with the default cap of two sessions per user."""
    return RefreshTokenManager(store=store, clock=clock)


# -------------------------------- Tests ----------------------------------- #
def test_create_stores_only_the_digest(manager, store):
    token = manager.create("u1")

    digest = OpaqueTokenHasher().hash_refresh_token(token)
    view = store.get_by_hash(digest)
    assert view is not None
    assert view.user_id == "u1"
    assert view.expires_at == WEEK
    assert store.get_by_hash(token) is None


def test_create_honors_explicit_ttl(manager, store):
    token = manager.create("u1", ttl=60)
    view = store.get_by_hash(OpaqueTokenHasher().hash_refresh_token(token))
    assert view.expires_at == 60


def test_session_cap_keeps_the_newest(manager, store, clock):
    """Cap 2, tokens at t=0,1,2: the t=0 token is evicted, t=1 and t=2 remain."""
    tokens = []
    for t in range(3):
        clock.set(t)
        tokens.append(manager.create("u1"))

    assert len(store.get_tokens_by_user_id("u1")) == 2
    with pytest.raises(InvalidTokenError):
        manager.verify(tokens[0])
    assert manager.verify(tokens[1]) == "u1"
    assert manager.verify(tokens[2]) == "u1"


def test_session_cap_is_per_user(manager, store):
    for _ in range(3):
        manager.create("u1")
    manager.create("u2")

    assert len(store.get_tokens_by_user_id("u1")) == 2
    assert len(store.get_tokens_by_user_id("u2")) == 1


def test_cap_of_one_replaces_the_previous_session(store, clock):
    manager = RefreshTokenManager(store=store, clock=clock, max_sessions=1)
    first = manager.create("u1")
    second = manager.create("u1")

    assert isinstance(manager.check(first), Err)
    assert manager.verify(second) == "u1"


def test_expired_records_are_purged_before_cap(manager, store, clock):
    """Expired rows never count against the cap (they are removed first)."""
    old = manager.create("u1", ttl=10)
    keep = manager.create("u1")
    clock.set(11)

    new = manager.create("u1")

    assert store.get_by_hash(OpaqueTokenHasher().hash_refresh_token(old)) is None
    assert manager.verify(keep) == "u1"
    assert manager.verify(new) == "u1"


def test_check_unknown_token_is_invalid(manager):
    result = manager.check("does-not-exist")
    assert isinstance(result, Err)
    assert type(result.error) is InvalidTokenError
    assert result.error.message == "invalid refresh token"


def test_expired_token_is_reported_and_deleted(manager, store, clock):
    """Issued at t=0 with ttl 604800; verifying at t=604801 fails and removes the row."""
    token = manager.create("u1")
    clock.set(WEEK + 1)

    with pytest.raises(ExpiredTokenError, match="refresh token expired"):
        manager.verify(token)
    assert len(store) == 0
    # second attempt no longer finds it
    with pytest.raises(InvalidTokenError) as excinfo:
        manager.verify(token)
    assert not isinstance(excinfo.value, ExpiredTokenError)


def test_token_is_still_valid_at_its_expiry_instant(manager, clock):
    token = manager.create("u1")
    clock.set(WEEK)
    assert isinstance(manager.check(token), Ok)


def test_revoke_is_idempotent(manager):
    token = manager.create("u1")

    assert manager.revoke(token) is True
    assert manager.revoke(token) is False
    assert manager.revoke("never-issued") is False
    assert isinstance(manager.check(token), Err)


def test_revoke_all_for_user(manager, store):
    a = manager.create("u1")
    b = manager.create("u1")
    other = manager.create("u2")

    assert manager.revoke_all_for_user("u1") == 2
    assert isinstance(manager.check(a), Err)
    assert isinstance(manager.check(b), Err)
    assert manager.verify(other) == "u2"


def test_count_sessions_ignores_expired(manager, clock):
    manager.create("u1", ttl=5)
    manager.create("u1")
    clock.set(6)
    assert manager.count_sessions("u1") == 1


def test_events_are_logged_without_plaintext(manager, clock, caplog):
    caplog.set_level(logging.INFO, logger="authcore.services.refresh_tokens.service")
    tokens = [manager.create("u1") for _ in range(3)]
    manager.revoke(tokens[-1])

    events = [getattr(r, "event", None) for r in caplog.records]
    assert "refresh.issued" in events
    assert "refresh.evicted" in events
    assert "refresh.revoked" in events
    for record in caplog.records:
        for token in tokens:
            assert token not in record.getMessage()
            assert token != getattr(record, "token", None)
