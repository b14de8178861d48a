# authcore/services/refresh_tokens/service.py
from __future__ import annotations

import logging

from authcore.services._shared.errors import ExpiredTokenError, InvalidTokenError
from authcore.services._shared.ports.clock import Clock, SystemClock
from authcore.services._shared.ports.refresh_token_store import RefreshTokenStore
from authcore.services._shared.result import Err, Ok, Result
from authcore.services.tokens.hasher import OpaqueTokenHasher, token_fingerprint

log = logging.getLogger(__name__)

DEFAULT_REFRESH_TTL = 7 * 24 * 3600
DEFAULT_MAX_SESSIONS = 2


class RefreshTokenManager:
    """
    Session policy layer between the refresh token store and its callers.

    Responsibilities
    ----------------
    - Issue refresh secrets (expired-record hygiene, then session cap, then insert).
    - Verify secrets by digest lookup, purging expired records on sight.
    - Revoke single tokens or every token of a user.

    Notes
    -----
    - Only digests reach the store; the plaintext leaves :meth:`create` once.
    - Cap enforcement is list-then-delete without compare-and-swap; two
      simultaneous ``create`` calls for one user may exceed the cap by one.
    """

    def __init__(
        self,
        *,
        store: RefreshTokenStore,
        hasher: OpaqueTokenHasher | None = None,
        clock: Clock | None = None,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        default_ttl: int = DEFAULT_REFRESH_TTL,
    ) -> None:
        """
        :param store: Persistence adapter.
        :param hasher: Secret generator/digest (defaults to :class:`OpaqueTokenHasher`).
        :param clock: Time source (defaults to :class:`SystemClock`).
        :param max_sessions: Live refresh tokens allowed per user, including a new one.
        :param default_ttl: Lifetime applied when :meth:`create` gets no ``ttl``.
        """
        self.store = store
        self.hasher = hasher or OpaqueTokenHasher()
        self.clock = clock or SystemClock()
        self.max_sessions = max_sessions
        self.default_ttl = default_ttl

    # ------------------------------------------------------------------ #
    # Issuance
    # ------------------------------------------------------------------ #

    def create(self, user_id: str, ttl: int | None = None) -> str:
        """
        Issue a refresh secret for ``user_id``.

        :param user_id: Owner identity.
        :param ttl: Lifetime in seconds (defaults to ``default_ttl``).
        :returns: The plaintext secret.
        """
        now = self.clock.now()

        # Hygiene first so dead rows never count against the cap
        self.purge_expired(user_id, now)
        self._enforce_session_limit(user_id)

        token = self.hasher.create_refresh_token()
        token_hash = self.hasher.hash_refresh_token(token)
        expires_at = now + (self.default_ttl if ttl is None else ttl)
        self.store.create(user_id=user_id, token_hash=token_hash, expires_at=expires_at)
        log.info(
            "refresh token issued",
            extra={
                "event": "refresh.issued",
                "user_id": user_id,
                "token": token_fingerprint(token_hash),
            },
        )
        return token

    def purge_expired(self, user_id: str, now: int | None = None) -> int:
        """Delete the records of ``user_id`` that expired before ``now``. :returns: Rows removed."""
        now = self.clock.now() if now is None else now
        purged = self.store.delete_expired_for_user(user_id, now)
        if purged:
            log.info(
                "refresh tokens purged",
                extra={"event": "refresh.purge_expired", "user_id": user_id, "count": purged},
            )
        return purged

    def _enforce_session_limit(self, user_id: str) -> None:
        """Keep only the newest ``max_sessions - 1`` records to make room for one more."""
        keep = max(self.max_sessions - 1, 0)
        ids = self.store.get_tokens_by_user_id(user_id)
        if len(ids) <= keep:
            return
        evicted = self.store.delete_tokens(ids[keep:])
        log.info(
            "session cap enforced",
            extra={"event": "refresh.evicted", "user_id": user_id, "count": evicted},
        )

    # ------------------------------------------------------------------ #
    # Verification
    # ------------------------------------------------------------------ #

    def check(self, token: str) -> Result[str]:
        """
        Resolve ``token`` to its owner without raising.

        An expired record is deleted before the failure is returned.

        :returns: ``Ok(user_id)``, ``Err(InvalidTokenError)`` or ``Err(ExpiredTokenError)``.
        """
        token_hash = self.hasher.hash_refresh_token(token)
        record = self.store.get_by_hash(token_hash)
        if record is None:
            return Err(InvalidTokenError("invalid refresh token"))

        if record.expires_at < self.clock.now():
            self.store.delete_by_hash(token_hash)
            log.info(
                "expired refresh token purged",
                extra={
                    "event": "refresh.expired",
                    "user_id": record.user_id,
                    "token": token_fingerprint(token_hash),
                },
            )
            return Err(ExpiredTokenError("refresh token expired"))

        return Ok(record.user_id)

    def verify(self, token: str) -> str:
        """
        Resolve ``token`` to its owner.

        :raises InvalidTokenError: Unknown token.
        :raises ExpiredTokenError: Known but expired token (record deleted).
        """
        return self.check(token).unwrap()

    # ------------------------------------------------------------------ #
    # Revocation
    # ------------------------------------------------------------------ #

    def revoke(self, token: str) -> bool:
        """Delete the record for ``token``. Idempotent. :returns: True if a row was removed."""
        token_hash = self.hasher.hash_refresh_token(token)
        removed = self.store.delete_by_hash(token_hash) > 0
        if removed:
            log.info(
                "refresh token revoked",
                extra={"event": "refresh.revoked", "token": token_fingerprint(token_hash)},
            )
        return removed

    def revoke_all_for_user(self, user_id: str) -> int:
        """Delete every record of ``user_id`` ("log out everywhere")."""
        count = self.store.delete_all_for_user(user_id)
        log.info(
            "all refresh tokens revoked",
            extra={"event": "refresh.revoked_all", "user_id": user_id, "count": count},
        )
        return count

    def count_sessions(self, user_id: str) -> int:
        """Number of live (non-expired) records for ``user_id``."""
        self.purge_expired(user_id)
        return len(self.store.get_tokens_by_user_id(user_id))
