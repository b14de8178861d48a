"""Short-lived signed access tokens (JWT via PyJWT)."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any

import jwt

from authcore.services._shared.errors import ConfigurationError, InvalidTokenError
from authcore.services._shared.ports.clock import Clock, SystemClock
from authcore.services._shared.result import Err, Ok, Result
from authcore.services.auth.dto import AuthSettings

log = logging.getLogger(__name__)

#: Claims owned by the issuer; caller-supplied values under these keys are overwritten.
STANDARD_CLAIMS = ("iat", "nbf", "exp")


def _coerce_timestamp(value: Any) -> int | None:
    """Return ``value`` as integer epoch seconds, or ``None`` when malformed."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return int(parsed) if math.isfinite(parsed) else None
    return None


class SignedTokenIssuer:
    """
    Mint and validate signed access tokens; decide refresh urgency.

    Tokens carry arbitrary caller claims plus ``iat``/``nbf``/``exp``. Expiry
    and not-before are evaluated against an explicit ``now`` (or the injected
    clock) rather than the library's wall clock, so behavior is reproducible.
    """

    def __init__(self, settings: AuthSettings, *, clock: Clock | None = None) -> None:
        """
        :param settings: Validated token configuration.
        :param clock: Time source (defaults to :class:`SystemClock`).
        :raises ConfigurationError: If the signing secret is empty.
        """
        if not settings.secret:
            raise ConfigurationError("JWT secret is not set")
        self._secret = settings.secret
        self._algorithm = settings.algorithm
        self._lifetime = settings.access_expires
        self._threshold = settings.refresh_threshold
        self._clock = clock or SystemClock()

    @property
    def lifetime(self) -> int:
        """Access token lifetime in seconds."""
        return self._lifetime

    def _now(self, now: int | None) -> int:
        return self._clock.now() if now is None else now

    # ------------------------------------------------------------------ #
    # Issuance
    # ------------------------------------------------------------------ #

    def create(self, claims: Mapping[str, Any], now: int | None = None) -> str:
        """
        Sign ``claims`` merged with fresh standard claims.

        :param claims: Custom payload claims.
        :param now: Issuance time (epoch seconds); defaults to the clock.
        :returns: Encoded JWT.
        """
        issued_at = self._now(now)
        payload = dict(claims)
        payload.update({"iat": issued_at, "nbf": issued_at, "exp": issued_at + self._lifetime})
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def refresh(self, claims: Mapping[str, Any], now: int | None = None) -> str:
        """Re-issue a token keeping every custom claim verbatim."""
        custom = {k: v for k, v in claims.items() if k not in STANDARD_CLAIMS}
        return self.create(custom, now)

    # ------------------------------------------------------------------ #
    # Validation
    # ------------------------------------------------------------------ #

    def decode(self, token: str, now: int | None = None) -> Result[dict[str, Any]]:
        """
        Validate ``token`` without raising.

        :returns: ``Ok(claims)`` or ``Err(InvalidTokenError)``.
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "verify_exp": False,
                    "verify_nbf": False,
                    "verify_iat": False,
                    # Caller claims are opaque: no audience/issuer is configured
                    "verify_aud": False,
                    "verify_iss": False,
                    "verify_sub": False,
                    "verify_jti": False,
                    "require": list(STANDARD_CLAIMS),
                },
            )
        except jwt.InvalidTokenError as exc:
            return Err(InvalidTokenError(f"invalid token: {exc}"))

        expires_at = _coerce_timestamp(claims.get("exp"))
        not_before = _coerce_timestamp(claims.get("nbf"))
        if expires_at is None or not_before is None:
            return Err(InvalidTokenError("invalid token: malformed time claims"))

        current = self._now(now)
        if not_before > current:
            return Err(InvalidTokenError("token not yet valid"))
        if current >= expires_at:
            return Err(InvalidTokenError("token expired"))
        return Ok(claims)

    def decode_strict(self, token: str, now: int | None = None) -> dict[str, Any]:
        """
        Validate ``token``.

        :raises InvalidTokenError: On bad signature, malformed structure,
            not-yet-valid or expired tokens.
        """
        return self.decode(token, now).unwrap()

    def verify(self, token: str | None, now: int | None = None) -> dict[str, Any] | None:
        """Permissive variant of :meth:`decode_strict`; ``None`` on any failure."""
        if not token or not isinstance(token, str):
            return None
        result = self.decode(token, now)
        if isinstance(result, Err):
            log.debug("access token rejected", extra={"reason": result.error.message})
            return None
        return result.value

    def should_refresh(self, claims: Mapping[str, Any], now: int | None = None) -> bool:
        """
        Return ``True`` when the token is within the refresh threshold of expiry.

        A missing or malformed ``exp`` counts as due for refresh.
        """
        expires_at = _coerce_timestamp(claims.get("exp"))
        if expires_at is None:
            return True
        return (expires_at - self._now(now)) < self._threshold
