# tests/unit/services/test_token_hasher.py
from __future__ import annotations

import hashlib
import re

from authcore.services.tokens.hasher import OpaqueTokenHasher, token_fingerprint

HEX64 = re.compile(r"^[0-9a-f]{64}$")


def test_refresh_tokens_are_64_hex_chars_and_unique():
    hasher = OpaqueTokenHasher()
    tokens = {hasher.create_refresh_token() for _ in range(200)}

    assert len(tokens) == 200
    assert all(HEX64.match(t) for t in tokens)


def test_hash_is_deterministic_sha256():
    hasher = OpaqueTokenHasher()
    digest = hasher.hash_refresh_token("secret")

    assert digest == hasher.hash_refresh_token("secret")
    assert digest == hashlib.sha256(b"secret").hexdigest()
    assert HEX64.match(digest)
    assert digest != hasher.hash_refresh_token("secret2")


def test_fingerprint_is_a_digest_prefix():
    digest = OpaqueTokenHasher().hash_refresh_token("secret")
    assert token_fingerprint(digest) == digest[:12]
