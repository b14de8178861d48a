"""Service layer public API.

Re-exports
----------
- Base primitives (from ``authcore.services._shared.base``)
    * :class:`BaseService`

Concrete services live in their own subpackages and are imported directly:

- :mod:`authcore.services.tokens` (access token issuer, refresh secret hasher)
- :mod:`authcore.services.refresh_tokens` (refresh token lifecycle)
- :mod:`authcore.services.auth` (session orchestration)
"""

from __future__ import annotations

from ._shared.base import BaseService

__all__ = ["BaseService"]
