# authcore/services/auth/service.py
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from authcore.services._shared.base import BaseService
from authcore.services._shared.errors import InvalidTokenError
from authcore.services._shared.ports.clock import Clock, SystemClock
from authcore.services._shared.ports.credential_transport import CredentialTransport
from authcore.services._shared.result import Err
from authcore.services.auth.dto import AuthSettings, TokenPairOut
from authcore.services.refresh_tokens.service import RefreshTokenManager
from authcore.services.tokens.issuer import SignedTokenIssuer

log = logging.getLogger(__name__)

#: Claim carrying the user identity inside access tokens.
IDENTITY_CLAIM = "id"


class SessionService(BaseService):
    """
    Session lifecycle service (start / refresh / sign-out / per-request auth).

    Access tokens are issued and validated via :class:`SignedTokenIssuer`;
    refresh tokens are single-use and managed by :class:`RefreshTokenManager`;
    both travel through an injected :class:`CredentialTransport`.
    """

    def __init__(
        self,
        *,
        issuer: SignedTokenIssuer,
        refresh_tokens: RefreshTokenManager,
        settings: AuthSettings,
        clock: Clock | None = None,
        checkpoint: Callable[[], None] | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param issuer: Access token issuer.
        :param refresh_tokens: Refresh token policy layer (bound to a store).
        :param settings: Token lifetimes.
        :param clock: Time source used for cookie expirations.
        :param checkpoint: Called once the presented refresh token is consumed,
            e.g. a transaction commit making the consumption durable.
        """
        self.issuer = issuer
        self.refresh_tokens = refresh_tokens
        self.settings = settings
        self.clock = clock or SystemClock()
        self.checkpoint = checkpoint

    # ------------------------------------------------------------------ #
    # Session start (sign-in / sign-up)
    # ------------------------------------------------------------------ #

    def start_session(self, user_id: str, transport: CredentialTransport) -> TokenPairOut:
        """
        Issue a fresh credential pair for an already-authenticated user.

        Called by the host's sign-in/sign-up flows once credentials are checked.

        :param user_id: Verified identity.
        :param transport: Where both credentials are written.
        :returns: The issued pair.
        """
        pair = self._issue_pair(str(user_id))
        self._write_pair(pair, transport)
        log.info("session started", extra={"event": "session.start", "user_id": str(user_id)})
        return pair

    # ------------------------------------------------------------------ #
    # Refresh with mandatory rotation
    # ------------------------------------------------------------------ #

    def refresh(self, transport: CredentialTransport) -> TokenPairOut:
        """
        Exchange the presented refresh credential for a new pair.

        Security
        --------
        - The presented token is revoked as soon as it verifies (single use).
        - If another request consumed it first, this one fails.
        - A failure after revocation is not rolled back: the client must sign in again.

        :raises InvalidTokenError: Missing, unknown or already-consumed token.
        :raises ExpiredTokenError: Expired token (its record is purged).
        """
        # 1) Read
        presented = transport.get_refresh_token()
        if not presented:
            log.warning(
                "refresh rejected", extra={"event": "session.refresh_failed", "reason": "missing"}
            )
            raise InvalidTokenError("refresh token missing")

        # 2) Verify (error kind preserved for the caller)
        result = self.refresh_tokens.check(presented)
        if isinstance(result, Err):
            log.warning(
                "refresh rejected",
                extra={"event": "session.refresh_failed", "reason": result.error.reason},
            )
            raise result.error
        user_id = result.value

        # 3) Consume; zero rows means a concurrent request won the race
        if not self.refresh_tokens.revoke(presented):
            log.warning(
                "refresh rejected",
                extra={
                    "event": "session.refresh_failed",
                    "reason": "consumed",
                    "user_id": user_id,
                },
            )
            raise InvalidTokenError("refresh token already used")
        if self.checkpoint is not None:
            self.checkpoint()

        # 4-6) Reissue both credentials and hand them to the transport
        pair = self._issue_pair(user_id)
        self._write_pair(pair, transport)
        log.info("session refreshed", extra={"event": "session.refresh", "user_id": user_id})
        return pair

    # ------------------------------------------------------------------ #
    # Sign-out
    # ------------------------------------------------------------------ #

    def sign_out(self, transport: CredentialTransport) -> None:
        """Revoke the presented refresh credential (if any) and clear both credentials."""
        presented = transport.get_refresh_token()
        if presented:
            self.refresh_tokens.revoke(presented)
        transport.clear_access_token()
        transport.clear_refresh_token()
        log.info("session ended", extra={"event": "session.sign_out"})

    def sign_out_everywhere(self, user_id: str, transport: CredentialTransport) -> int:
        """
        Revoke every refresh credential of ``user_id`` and clear this client's.

        :returns: Number of sessions revoked.
        """
        count = self.refresh_tokens.revoke_all_for_user(str(user_id))
        transport.clear_access_token()
        transport.clear_refresh_token()
        return count

    # ------------------------------------------------------------------ #
    # Per-request authentication
    # ------------------------------------------------------------------ #

    def authenticate(
        self, transport: CredentialTransport, now: int | None = None
    ) -> dict[str, Any] | None:
        """
        Resolve the access credential into claims, renewing it when near expiry.

        Invalid or missing credentials fall through to ``None`` (anonymous).

        :param transport: Source of the access credential.
        :param now: Evaluation time (epoch seconds); defaults to the clock.
        :returns: Claims or ``None``.
        """
        now = self.clock.now() if now is None else now
        claims = self.issuer.verify(transport.get_access_token(), now)
        if claims is None:
            return None

        if self.issuer.should_refresh(claims, now):
            renewed = self.issuer.refresh(claims, now)
            transport.set_access_token(renewed, now + self.settings.access_expires)
            log.debug(
                "access token renewed",
                extra={"event": "session.access_renewed", "user_id": self.resolve_identity(claims)},
            )
        return claims

    @staticmethod
    def resolve_identity(claims: dict[str, Any] | None) -> str | None:
        """Return the user id carried by access-token ``claims``."""
        if not claims:
            return None
        identity = claims.get(IDENTITY_CLAIM)
        if identity is None or isinstance(identity, bool):
            return None
        return str(identity)

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _issue_pair(self, user_id: str) -> TokenPairOut:
        now = self.clock.now()
        refresh_token = self.refresh_tokens.create(user_id, self.settings.refresh_expires)
        access_token = self.issuer.create({IDENTITY_CLAIM: user_id}, now)
        return TokenPairOut(
            access_token=access_token,
            refresh_token=refresh_token,
            access_expires_at=now + self.settings.access_expires,
            refresh_expires_at=now + self.settings.refresh_expires,
        )

    @staticmethod
    def _write_pair(pair: TokenPairOut, transport: CredentialTransport) -> None:
        transport.set_access_token(pair.access_token, pair.access_expires_at)
        transport.set_refresh_token(pair.refresh_token, pair.refresh_expires_at)
