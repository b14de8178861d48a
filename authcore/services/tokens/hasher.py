"""Opaque refresh secrets and their storage digests."""

from __future__ import annotations

import hashlib
import secrets

#: Random bytes per refresh secret (256 bits; 64 hex characters).
REFRESH_TOKEN_BYTES = 32


class OpaqueTokenHasher:
    """Generate unguessable refresh secrets and one-way digests for storage."""

    def create_refresh_token(self) -> str:
        """Return a new hex-encoded secret from the OS CSPRNG."""
        return secrets.token_hex(REFRESH_TOKEN_BYTES)

    def hash_refresh_token(self, token: str) -> str:
        """Return the SHA-256 hex digest of ``token`` (store lookup key)."""
        return hashlib.sha256(token.encode("utf-8")).hexdigest()


def token_fingerprint(token_hash: str) -> str:
    """Short, log-safe reference to a stored digest."""
    return token_hash[:12]
