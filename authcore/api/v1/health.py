"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from authcore.api.deps import json_response, timing
from authcore.core.extensions import db, get_redis

bp = Blueprint("health", __name__)


def _store_status() -> str:
    backend = current_app.config.get("REFRESH_STORE_BACKEND", "sql")
    try:
        if backend == "redis":
            get_redis().ping()
        else:
            db.session.execute(text("SELECT 1"))
    except (SQLAlchemyError, RedisError, RuntimeError):
        current_app.logger.exception("healthcheck.store_error")
        return "fail"
    return "ok"


@bp.get("/health")
@timing
def healthcheck():
    """Return application and refresh token store health information."""

    store_status = _store_status()
    payload = {
        "status": "ok" if store_status == "ok" else "degraded",
        "store": store_status,
        "backend": current_app.config.get("REFRESH_STORE_BACKEND", "sql"),
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response(payload, status=200 if store_status == "ok" else 503)
