# tests/unit/infra/test_redis_refresh_token_store.py
"""
Unit tests for RedisRefreshTokenStore using fakeredis.

They exercise the store contract (ids newest first, rowcount-reporting
deletes, expiry filtering) plus the Redis-specific layout: key TTLs and
pruning of index entries whose record already expired.
"""

from __future__ import annotations

import time

import fakeredis
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from authcore.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from authcore.services._shared.errors import (
    ExpiredTokenError,
    InvalidTokenError,
    StoreUnavailableError,
)
from authcore.services._shared.ports import FixedClock
from authcore.services.refresh_tokens.service import RefreshTokenManager

NOW = 1_700_000_000


def _hash(i: int) -> str:
    """Predictable 64-char digests for tests."""
    return f"{i:064x}"


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def store(fake_redis, clock):
    """Provide a RedisRefreshTokenStore backed by FakeRedis."""
    return RedisRefreshTokenStore(r=fake_redis, clock=clock)


def test_create_and_get_by_hash(store):
    """create() returns increasing ids and the record is readable by digest."""
    first = store.create(user_id="u1", token_hash=_hash(1), expires_at=NOW + 60)
    second = store.create(user_id="u1", token_hash=_hash(2), expires_at=NOW + 60)

    assert second > first
    view = store.get_by_hash(_hash(1))
    assert view is not None
    assert view.user_id == "u1"
    assert view.expires_at == NOW + 60
    assert store.get_by_hash(_hash(99)) is None


def test_duplicate_hash_is_rejected(store):
    store.create(user_id="u1", token_hash=_hash(1), expires_at=NOW + 60)
    with pytest.raises(ValueError):
        store.create(user_id="u2", token_hash=_hash(1), expires_at=NOW + 60)


def test_keys_outlive_expiry_by_the_grace_window(fake_redis, clock):
    store = RedisRefreshTokenStore(r=fake_redis, clock=clock, grace=300)
    store.create(user_id="u1", token_hash=_hash(1), expires_at=NOW + 60)
    ttl = store.r.ttl(store._k(_hash(1)))
    assert 60 < ttl <= 360


def test_expired_token_is_reported_as_expired_after_its_instant(store, clock):
    """Past ``expires_at`` the record is still there, so the manager reports
    expiry (and purges) instead of treating the token as unknown."""
    manager = RefreshTokenManager(store=store, clock=clock)
    token = manager.create("u1", ttl=0)

    time.sleep(1.5)
    clock.advance(2)

    with pytest.raises(ExpiredTokenError):
        manager.verify(token)
    assert store.get_tokens_by_user_id("u1") == []
    with pytest.raises(InvalidTokenError) as exc_info:
        manager.verify(token)
    assert not isinstance(exc_info.value, ExpiredTokenError)


def test_ids_are_listed_newest_first(store):
    ids = [store.create(user_id="u1", token_hash=_hash(i), expires_at=NOW + 60) for i in range(3)]
    store.create(user_id="u2", token_hash=_hash(10), expires_at=NOW + 60)

    assert store.get_tokens_by_user_id("u1") == sorted(ids, reverse=True)


def test_delete_tokens_by_id(store):
    ids = [store.create(user_id="u1", token_hash=_hash(i), expires_at=NOW + 60) for i in range(3)]

    assert store.delete_tokens([]) == 0
    assert store.delete_tokens(ids[:2]) == 2
    assert store.get_tokens_by_user_id("u1") == [ids[2]]
    assert store.get_by_hash(_hash(0)) is None


def test_delete_by_hash_reports_rows_removed(store):
    """The second delete sees zero rows: the basis of single-use consumption."""
    store.create(user_id="u1", token_hash=_hash(1), expires_at=NOW + 60)

    assert store.delete_by_hash(_hash(1)) == 1
    assert store.delete_by_hash(_hash(1)) == 0
    assert store.get_tokens_by_user_id("u1") == []


def test_delete_expired_for_user_is_strict(store):
    store.create(user_id="u1", token_hash=_hash(1), expires_at=NOW - 1)
    store.create(user_id="u1", token_hash=_hash(2), expires_at=NOW)
    store.create(user_id="u2", token_hash=_hash(3), expires_at=NOW - 1)

    assert store.delete_expired_for_user("u1", NOW) == 1
    assert store.get_by_hash(_hash(2)) is not None
    assert store.get_by_hash(_hash(3)) is not None


def test_delete_all_for_user(store):
    for i in range(3):
        store.create(user_id="u1", token_hash=_hash(i), expires_at=NOW + 60)
    store.create(user_id="u2", token_hash=_hash(10), expires_at=NOW + 60)

    assert store.delete_all_for_user("u1") == 3
    assert store.get_tokens_by_user_id("u1") == []
    assert not store.r.exists(store._ku("u1"))
    assert store.get_tokens_by_user_id("u2") != []


def test_index_entries_of_vanished_records_are_pruned(store):
    """A record reclaimed by Redis (TTL) disappears from the user's listing."""
    store.create(user_id="u1", token_hash=_hash(1), expires_at=NOW + 60)
    keep = store.create(user_id="u1", token_hash=_hash(2), expires_at=NOW + 60)
    store.r.delete(store._k(_hash(1)))

    assert store.get_tokens_by_user_id("u1") == [keep]
    assert store.r.zcard(store._ku("u1")) == 1


def test_manager_session_cap_over_redis(store, clock):
    """Cap of two with tokens at t, t+1, t+2 leaves the two newest."""
    manager = RefreshTokenManager(store=store, clock=clock)
    tokens = []
    for _ in range(3):
        tokens.append(manager.create("u1"))
        clock.advance(1)

    assert len(store.get_tokens_by_user_id("u1")) == 2
    assert manager.revoke(tokens[0]) is False
    assert manager.verify(tokens[1]) == "u1"
    assert manager.verify(tokens[2]) == "u1"


def test_connection_errors_become_store_unavailable(store, monkeypatch):
    def _down(*_args, **_kwargs):
        raise RedisConnectionError("connection refused")

    monkeypatch.setattr(store.r, "hmget", _down)
    with pytest.raises(StoreUnavailableError):
        store.get_by_hash(_hash(1))
