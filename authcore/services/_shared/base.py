# authcore/services/_shared/base.py
from __future__ import annotations

from authcore.core import errors as api_errors
from authcore.services._shared.errors import (
    AuthError,
    ConfigurationError,
    InvalidTokenError,
    ServiceError,
    StoreUnavailableError,
)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Centralize error translation to the HTTP layer.

    Notes
    -----
    - Services never open transactions themselves; the API layer wraps each
      request in a Unit of Work and hands the bound store in.
    """

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, InvalidTokenError):
            # → 401 Unauthorized (invalid and expired look the same to clients)
            return api_errors.Unauthorized("Authentication required")

        if isinstance(exc, StoreUnavailableError):
            # → 503 Service Unavailable
            return api_errors.ServiceUnavailable()

        if isinstance(exc, ConfigurationError):
            # → 500 Internal Server Error
            return api_errors.APIError(
                message="Unexpected error",
                status_code=500,
                code="internal_server_error",
            )

        # Any other auth/service error → 400 Bad Request
        if isinstance(exc, AuthError | ServiceError):
            return api_errors.APIError(
                message=str(exc),
                status_code=400,
                code="bad_request",
            )

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
