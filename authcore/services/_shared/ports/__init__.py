"""
authcore.services._shared.ports
===============================

Collection of *ports* (hexagonal interfaces) that define the contracts
between the token services and the infrastructure they run on.

Modules
-------
- :mod:`refresh_token_store`:
    Defines :class:`~.RefreshTokenStore` and :class:`~.RefreshTokenView`,
    the persistence contract for hashed refresh tokens.

- :mod:`credential_transport`:
    Defines :class:`~.CredentialTransport`, the cookie/header surface the
    credentials travel through.

- :mod:`clock`:
    Defines :class:`~.Clock`, the injectable time source.

Design Notes
------------
Concrete adapters (SQLAlchemy, Redis, Flask cookies) implement these
interfaces under ``authcore.repositories`` and ``authcore.infra``. The
in-memory doubles shipped here are used by unit tests.
"""

from __future__ import annotations

from .clock import Clock, FixedClock, SystemClock
from .credential_transport import CredentialTransport, InMemoryCredentialTransport
from .refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenStore,
    RefreshTokenView,
)

__all__ = [
    "Clock",
    "SystemClock",
    "FixedClock",
    "CredentialTransport",
    "InMemoryCredentialTransport",
    "RefreshTokenStore",
    "RefreshTokenView",
    "InMemoryRefreshTokenStore",
]
