"""Helpers for inspecting ``Set-Cookie`` headers."""

from __future__ import annotations

from werkzeug.test import TestResponse


def set_cookie_headers(resp: TestResponse) -> dict[str, str]:
    """Map cookie name -> raw ``Set-Cookie`` header for ``resp``."""

    headers: dict[str, str] = {}
    for raw in resp.headers.getlist("Set-Cookie"):
        name = raw.split("=", 1)[0]
        headers[name] = raw
    return headers


def cookie_value(raw_header: str) -> str:
    """Return the value part of a raw ``Set-Cookie`` header."""

    return raw_header.split(";", 1)[0].split("=", 1)[1]


def cookie_attributes(raw_header: str) -> set[str]:
    """Return the lower-cased attribute names/values of a ``Set-Cookie`` header."""

    return {part.strip().lower() for part in raw_header.split(";")[1:]}
