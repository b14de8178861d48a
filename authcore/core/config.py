"""Environment-driven configuration classes for the auth service."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Selects the config class: 'development' | 'testing' | 'production'
ENV_VAR: Final[str] = "APP_ENV"

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "y", "on"})

# A missing .env file is not an error
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Read a flag such as ``COOKIE_SECURE`` from the environment.

    Parameters
    ----------
    name: str
        Variable name.
    default: bool, optional
        Returned when ``name`` is not set at all.

    Returns
    -------
    bool
        Whether the value is one of ``1/true/yes/y/on`` (case-insensitive).
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def env_int(name: str, default: int) -> int:
    """Read an integer such as a token lifetime from the environment.

    A malformed value is returned as-is (string) so startup validation
    reports it instead of silently falling back to ``default``.
    """
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return raw  # type: ignore[return-value]


class BaseConfig:
    """Settings common to every environment.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Mount point of the versioned API blueprints.
    JWT_SECRET_KEY: str
        HMAC secret for access tokens. No default: startup fails when empty.
    JWT_ALGORITHM: str
        Signing algorithm identifier (``HS256`` by default).
    ACCESS_TOKEN_EXPIRES: int
        Access token lifetime in seconds.
    ACCESS_TOKEN_REFRESH_THRESHOLD: int
        Remaining lifetime (seconds) below which access tokens are renewed.
    REFRESH_TOKEN_EXPIRES: int
        Refresh token lifetime in seconds (7 days).
    MAX_SESSIONS_PER_USER: int
        Concurrent refresh tokens allowed per user.
    REFRESH_STORE_BACKEND: str
        ``"sql"`` (relational, default) or ``"redis"``.
    REDIS_URL: str | None
        Redis connection URL, required by the ``redis`` backend.
    ACCESS_COOKIE_NAME / REFRESH_COOKIE_NAME: str
        Cookie names of both credentials.
    COOKIE_SECURE: bool
        Send cookies over HTTPS only. Disable for plain-HTTP local work only.
    COOKIE_SAMESITE: str
        ``SameSite`` attribute of both cookies.
    SQLALCHEMY_DATABASE_URI: str
        Where the ``refresh_tokens`` table lives (``DATABASE_URL``).
    LOG_LEVEL: str
        Level of the JSON root logger.
    CORS_ORIGINS: str
        Comma-separated browser origins allowed to send credentials.

    Notes
    -----
    Every value can be overridden through the environment (or ``.env``).
    The auth subset is validated once in :func:`authcore.factory.create_app`.
    """

    API_BASE_PREFIX = "/api"

    # Tokens
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRES = env_int("ACCESS_TOKEN_EXPIRES", 3600)
    ACCESS_TOKEN_REFRESH_THRESHOLD = env_int("ACCESS_TOKEN_REFRESH_THRESHOLD", 600)
    REFRESH_TOKEN_EXPIRES = env_int("REFRESH_TOKEN_EXPIRES", 604800)
    MAX_SESSIONS_PER_USER = env_int("MAX_SESSIONS_PER_USER", 2)

    # Refresh token store
    REFRESH_STORE_BACKEND = os.getenv("REFRESH_STORE_BACKEND", "sql")
    REDIS_URL = os.getenv("REDIS_URL") or None

    # Cookies
    ACCESS_COOKIE_NAME = os.getenv("ACCESS_COOKIE_NAME", "access_token")
    REFRESH_COOKIE_NAME = os.getenv("REFRESH_COOKIE_NAME", "refresh_token")
    COOKIE_SECURE = env_bool("COOKIE_SECURE", True)
    COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "Strict")

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./authcore.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO")

    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    CORS_MAX_AGE = 600

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Local development.

    Debug is on and cookies may travel over plain HTTP unless
    ``COOKIE_SECURE`` is set explicitly.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    COOKIE_SECURE = env_bool("COOKIE_SECURE", False)


class TestingConfig(BaseConfig):
    """Test runs.

    Notes
    -----
    - In-memory SQLite unless ``TEST_DATABASE_URL`` points elsewhere.
    - A fixed signing secret, so tests never depend on the environment.
    - Always the SQL store; Redis tests use ``fakeredis`` directly.
    """

    TESTING = True
    JWT_SECRET_KEY = os.getenv("TEST_JWT_SECRET_KEY", "testing-secret-key-with-32-bytes!")
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    REFRESH_STORE_BACKEND = "sql"
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Production: no debug, cookies are always ``Secure``."""

    COOKIE_SECURE = True
    SQLALCHEMY_ECHO = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Pick the config class named by ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class for :meth:`flask.Config.from_object`; unknown or unset names
        select :class:`DevelopmentConfig`.
    """
    env = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(env, DevelopmentConfig)
