# authcore/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass

from authcore.services._shared.errors import ConfigurationError

# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with freshly issued credentials.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Opaque refresh secret (plaintext, client copy only).
    :type refresh_token: str
    :param access_expires_at: Access credential expiry (epoch seconds).
    :type access_expires_at: int
    :param refresh_expires_at: Refresh credential expiry (epoch seconds).
    :type refresh_expires_at: int
    """

    access_token: str
    refresh_token: str
    access_expires_at: int
    refresh_expires_at: int


# ------------------------------ Config DTO -------------------------------- #

SUPPORTED_ALGORITHMS = frozenset({"HS256", "HS384", "HS512"})


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """
    Token emission configuration, validated once at startup.

    :param secret: HMAC signing secret. Required, non-empty.
    :type secret: str
    :param algorithm: JWT signing algorithm identifier.
    :type algorithm: str
    :param access_expires: Access token lifetime in seconds.
    :type access_expires: int
    :param refresh_threshold: Remaining lifetime (seconds) under which an
        access token is renewed.
    :type refresh_threshold: int
    :param refresh_expires: Refresh token lifetime in seconds.
    :type refresh_expires: int
    :param max_sessions: Concurrent refresh tokens allowed per user.
    :type max_sessions: int
    :raises ConfigurationError: If any value is missing or out of range.
    """

    secret: str
    algorithm: str = "HS256"
    access_expires: int = 3600
    refresh_threshold: int = 600
    refresh_expires: int = 7 * 24 * 3600
    max_sessions: int = 2

    def __post_init__(self) -> None:
        if not isinstance(self.secret, str) or not self.secret:
            raise ConfigurationError("JWT secret is not set")
        if self.algorithm not in SUPPORTED_ALGORITHMS:
            raise ConfigurationError(f"Unsupported JWT algorithm: {self.algorithm!r}")
        if self.access_expires <= 0:
            raise ConfigurationError("Access token lifetime must be positive")
        if self.refresh_threshold < 0:
            raise ConfigurationError("Refresh threshold must not be negative")
        if self.refresh_expires <= 0:
            raise ConfigurationError("Refresh token lifetime must be positive")
        if self.max_sessions < 1:
            raise ConfigurationError("At least one session per user must be allowed")
