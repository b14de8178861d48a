"""JSON logging to stdout, correlated by request id."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from flask import Flask, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
#: Inbound headers accepted as the correlation id, first match wins.
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

#: ``extra`` attributes copied into the JSON payload when present.
EXTRA_KEYS = ("event", "user_id", "reason", "count", "token", "endpoint", "elapsed_ms")

#: ``extra`` attributes that are masked if a caller ever passes them.
SECRET_KEYS = frozenset({"access_token", "refresh_token", "secret", "password"})
REDACTED = "[redacted]"


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Auth events carry ``event``/``user_id``/``reason`` through ``extra``.
    Tokens only ever appear as digest fingerprints under ``token``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update({k: getattr(record, k) for k in EXTRA_KEYS if hasattr(record, k)})
        payload.update({k: REDACTED for k in SECRET_KEYS if hasattr(record, k)})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Stamp ``request_id`` on every record (``None`` outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


def ensure_request_id() -> str:
    """Return the request's correlation id, adopting an inbound header or minting one."""

    if not has_request_context():
        return str(uuid4())
    request_id = g.get("request_id")
    if request_id is None:
        inbound = (request.headers.get(h) for h in CORRELATION_HEADERS)
        request_id = next((v for v in inbound if v), None) or str(uuid4())
        g.request_id = request_id
    return request_id


def _resolve_level(level: str | int) -> int | str:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else level.upper()


def configure_logging(level: str | int = "INFO") -> None:
    """Replace root handlers with a single JSON stdout handler at ``level``."""

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(_resolve_level(level))


def init_app(app: Flask) -> None:
    """Seed the request id early and echo it back on every response."""

    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _seed_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = ["configure_logging", "init_app", "ensure_request_id", "JSONFormatter", "RequestIdFilter"]
