# comments in English; reST docstrings
from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from functools import wraps
from typing import Any, TypeVar

import redis  # type: ignore[import-untyped]
from redis.exceptions import ConnectionError as RedisConnectionError  # type: ignore[import-untyped]
from redis.exceptions import TimeoutError as RedisTimeoutError  # type: ignore[import-untyped]

from authcore.services._shared.errors import StoreUnavailableError
from authcore.services._shared.ports import (
    Clock,
    RefreshTokenStore,
    RefreshTokenView,
    SystemClock,
)

F = TypeVar("F", bound=Callable[..., Any])


def _translate_outage(fn: F) -> F:
    """Re-raise connection loss and timeouts as :class:`StoreUnavailableError`."""

    @wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except (RedisConnectionError, RedisTimeoutError) as exc:
            raise StoreUnavailableError() from exc

    return wrapper  # type: ignore[return-value]


#: How long an expired record stays readable by default.
EXPIRED_GRACE_SECONDS = 7 * 24 * 3600


def _s(value: Any) -> str:
    return value.decode() if isinstance(value, bytes | bytearray) else str(value)


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh token store.

    Layout:

    * ``rt:h:<hash>``: hash ``{id, user_id, expires_at}``.
    * ``rt:i:<id>``: string pointing back at ``<hash>`` (lookup by id).
    * ``rt:u:<user_id>``: sorted set of ``<hash>`` scored by id (newest = highest).
    * ``rt:seq``: store-wide ``INCR`` counter handing out ids.

    Per-token keys outlive ``expires_at`` by ``grace`` seconds, so an expired
    token is still found and reported as expired (then purged) rather than
    unknown. Redis reclaims records nobody presents again on its own.
    Single-use consumption relies on ``DEL`` reporting how many keys it
    removed.

    :param r: A Redis client (already connected).
    :param clock: Time source used to compute key TTLs.
    :param grace: Seconds a record is kept past its expiry (default: 7 days).
    """

    r: redis.Redis
    clock: Clock = field(default_factory=SystemClock)
    grace: int = EXPIRED_GRACE_SECONDS

    # -------------------- helpers --------------------

    @staticmethod
    def _k(token_hash: str) -> str:
        return f"rt:h:{token_hash}"

    @staticmethod
    def _ki(record_id: int) -> str:
        return f"rt:i:{record_id}"

    @staticmethod
    def _ku(user_id: str) -> str:
        return f"rt:u:{user_id}"

    SEQ_KEY = "rt:seq"

    def _ttl(self, expires_at: int) -> int:
        return max(1, int(expires_at) - self.clock.now() + self.grace)

    def _remove(self, token_hash: str) -> int:
        """Delete one record and its index entries. :returns: 1 if this call removed it."""
        key = self._k(token_hash)
        user_id, record_id = self.r.hmget(key, ["user_id", "id"])
        removed = int(self.r.delete(key))
        pipe = self.r.pipeline(transaction=True)
        if user_id is not None:
            pipe.zrem(self._ku(_s(user_id)), token_hash)
        if record_id is not None:
            pipe.delete(self._ki(int(_s(record_id))))
        pipe.execute()
        return removed

    def _live(self, user_id: str) -> list[tuple[str, int]]:
        """Yield ``(hash, id)`` of the user's live records, newest first; prune stale entries."""
        k_user = self._ku(user_id)
        live: list[tuple[str, int]] = []
        stale: list[str] = []
        for member, score in self.r.zrevrange(k_user, 0, -1, withscores=True):
            token_hash = _s(member)
            if self.r.exists(self._k(token_hash)):
                live.append((token_hash, int(score)))
            else:
                stale.append(token_hash)
        if stale:
            self.r.zrem(k_user, *stale)
        return live

    # -------------------- API ------------------------

    @_translate_outage
    def create(self, *, user_id: str, token_hash: str, expires_at: int) -> int:
        key = self._k(token_hash)
        record_id = int(self.r.incr(self.SEQ_KEY))
        if not self.r.hsetnx(key, "id", record_id):
            raise ValueError("token_hash must be unique")

        ttl = self._ttl(expires_at)
        pipe = self.r.pipeline(transaction=True)
        pipe.hset(key, mapping={"user_id": user_id, "expires_at": str(int(expires_at))})
        pipe.expire(key, ttl)
        pipe.set(self._ki(record_id), token_hash, ex=ttl)
        pipe.zadd(self._ku(user_id), {token_hash: record_id})
        pipe.execute()
        return record_id

    @_translate_outage
    def get_tokens_by_user_id(self, user_id: str) -> list[int]:
        return [record_id for _, record_id in self._live(user_id)]

    @_translate_outage
    def delete_tokens(self, ids: Iterable[int]) -> int:
        removed = 0
        for record_id in ids:
            token_hash = self.r.get(self._ki(int(record_id)))
            if token_hash is not None:
                removed += self._remove(_s(token_hash))
        return removed

    @_translate_outage
    def delete_expired_for_user(self, user_id: str, now: int) -> int:
        removed = 0
        for token_hash, _ in self._live(user_id):
            raw = self.r.hget(self._k(token_hash), "expires_at")
            if raw is not None and int(_s(raw)) < int(now):
                removed += self._remove(token_hash)
        return removed

    @_translate_outage
    def get_by_hash(self, token_hash: str) -> RefreshTokenView | None:
        user_id, expires_at = self.r.hmget(self._k(token_hash), ["user_id", "expires_at"])
        if user_id is None or expires_at is None:
            return None
        return RefreshTokenView(user_id=_s(user_id), expires_at=int(_s(expires_at)))

    @_translate_outage
    def delete_by_hash(self, token_hash: str) -> int:
        return self._remove(token_hash)

    @_translate_outage
    def delete_all_for_user(self, user_id: str) -> int:
        removed = 0
        for token_hash, _ in self._live(user_id):
            removed += self._remove(token_hash)
        self.r.delete(self._ku(user_id))
        return removed
