from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class RefreshTokenView:
    """
    Read-model for a persisted refresh token.

    :ivar user_id: Owner user id.
    :ivar expires_at: Absolute expiration (epoch seconds).
    """

    user_id: str
    expires_at: int


class RefreshTokenStore(Protocol):
    """
    Persistence contract for refresh token records.

    Records are keyed by the SHA-256 digest of the opaque secret; the
    plaintext never reaches the store. Records are immutable: rotation
    deletes and recreates.

    ``delete_by_hash`` MUST be atomic and report how many rows it removed,
    since exactly-once consumption of a refresh token relies on it.
    """

    def create(self, *, user_id: str, token_hash: str, expires_at: int) -> int:
        """Insert a record. :returns: The store-assigned id."""

    def get_tokens_by_user_id(self, user_id: str) -> list[int]:
        """Return the ids of every record owned by ``user_id``, newest first."""

    def delete_tokens(self, ids: Iterable[int]) -> int:
        """Delete records by id. Empty input is a no-op. :returns: Rows removed."""

    def delete_expired_for_user(self, user_id: str, now: int) -> int:
        """Delete the user's records with ``expires_at < now``. :returns: Rows removed."""

    def get_by_hash(self, token_hash: str) -> RefreshTokenView | None:
        """Fetch the record matching a digest (if present)."""

    def delete_by_hash(self, token_hash: str) -> int:
        """Delete the record matching a digest. :returns: Rows removed (0 or 1)."""

    def delete_all_for_user(self, user_id: str) -> int:
        """Delete every record owned by ``user_id``. :returns: Rows removed."""


@dataclass(frozen=True, slots=True)
class _Record:
    id: int
    user_id: str
    expires_at: int


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory refresh token store.

    .. note::
       Uses a threading lock so concurrent deletes behave atomically in tests.
    """

    def __init__(self) -> None:
        self._by_hash: dict[str, _Record] = {}
        self._seq = 0
        self._lock = threading.Lock()

    def create(self, *, user_id: str, token_hash: str, expires_at: int) -> int:
        with self._lock:
            if token_hash in self._by_hash:
                raise ValueError("token_hash must be unique")
            self._seq += 1
            self._by_hash[token_hash] = _Record(id=self._seq, user_id=user_id, expires_at=expires_at)
            return self._seq

    def get_tokens_by_user_id(self, user_id: str) -> list[int]:
        with self._lock:
            ids = [r.id for r in self._by_hash.values() if r.user_id == user_id]
        return sorted(ids, reverse=True)

    def delete_tokens(self, ids: Iterable[int]) -> int:
        doomed = set(ids)
        if not doomed:
            return 0
        with self._lock:
            hashes = [h for h, r in self._by_hash.items() if r.id in doomed]
            for h in hashes:
                del self._by_hash[h]
            return len(hashes)

    def delete_expired_for_user(self, user_id: str, now: int) -> int:
        with self._lock:
            hashes = [
                h for h, r in self._by_hash.items() if r.user_id == user_id and r.expires_at < now
            ]
            for h in hashes:
                del self._by_hash[h]
            return len(hashes)

    def get_by_hash(self, token_hash: str) -> RefreshTokenView | None:
        r = self._by_hash.get(token_hash)
        if r is None:
            return None
        return RefreshTokenView(user_id=r.user_id, expires_at=r.expires_at)

    def delete_by_hash(self, token_hash: str) -> int:
        with self._lock:
            return 1 if self._by_hash.pop(token_hash, None) is not None else 0

    def delete_all_for_user(self, user_id: str) -> int:
        with self._lock:
            hashes = [h for h, r in self._by_hash.items() if r.user_id == user_id]
            for h in hashes:
                del self._by_hash[h]
            return len(hashes)

    def __len__(self) -> int:
        return len(self._by_hash)
