"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask, HTTP, Redis or SQLAlchemy directly. They serve as stable contracts
between store adapters, the token services and the HTTP layer.

The translation to HTTP responses (RFC 7807) is handled by
``authcore/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from store adapters or domain logic.
    - The API layer later translates them to ``APIError``.
    """

    pass


class AuthError(ServiceError):
    """Base class for authentication failures and misconfiguration."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# --------------------------------------------------------------------------- #
# Specific errors
# --------------------------------------------------------------------------- #


class ConfigurationError(AuthError):
    """
    Raised when the token services are built with an invalid configuration.

    A missing signing secret is fatal: the application factory lets this
    propagate so the process refuses to start.
    """


class InvalidTokenError(AuthError):
    """
    Raised for any credential that cannot be trusted.

    Covers bad signatures, malformed tokens, not-yet-valid or expired access
    tokens, and refresh secrets unknown to the store. Always surfaced to
    clients as *unauthenticated*.
    """

    #: Stable machine-readable reason used in logs.
    reason = "invalid"


class ExpiredTokenError(InvalidTokenError):
    """
    Raised when a refresh secret is found but already past its expiry.

    The record is deleted before this error propagates.
    """

    reason = "expired"


class StoreUnavailableError(ServiceError):
    """
    Raised by refresh-token store adapters when the backend cannot be reached.

    The core never retries; retry policy belongs to the store client.
    """

    def __init__(self, message: str = "Refresh token store unavailable") -> None:
        super().__init__(message)
        self.message = message
