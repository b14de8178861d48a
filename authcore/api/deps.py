"""Shared API helpers: session wiring, per-request authentication, responses."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Flask, Response, current_app, g, jsonify, request

from authcore.core.errors import Unauthorized
from authcore.infra.http import CookiePolicy, FlaskCookieTransport
from authcore.services._shared.ports import Clock, SystemClock
from authcore.services.auth.dto import AuthSettings
from authcore.services.auth.service import SessionService
from authcore.services.refresh_tokens.service import RefreshTokenManager
from authcore.services.tokens.issuer import SignedTokenIssuer
from authcore.uow import SQLAlchemyUnitOfWork, StoreUnitOfWork, UnitOfWork

F = TypeVar("F", bound=Callable[..., Any])


# ------------------------------- Wiring ---------------------------------------


def get_auth_settings() -> AuthSettings:
    """Return the settings validated by ``create_app``."""
    return current_app.extensions["auth_settings"]


def get_clock() -> Clock:
    """Return the app clock (tests may install a fixed one under ``auth_clock``)."""
    return current_app.extensions.get("auth_clock") or SystemClock()


def open_uow() -> UnitOfWork:
    """Return a Unit of Work for the configured refresh token backend."""
    backend = current_app.config.get("REFRESH_STORE_BACKEND", "sql")
    if backend == "redis":
        from authcore.core.extensions import get_redis
        from authcore.infra.redis import RedisRefreshTokenStore

        store = RedisRefreshTokenStore(
            r=get_redis(), clock=get_clock(), grace=get_auth_settings().refresh_expires
        )
        return StoreUnitOfWork(store)
    return SQLAlchemyUnitOfWork()


def build_session_service(uow: UnitOfWork) -> SessionService:
    """Assemble a :class:`SessionService` bound to ``uow``'s store."""
    settings = get_auth_settings()
    clock = get_clock()
    return SessionService(
        issuer=SignedTokenIssuer(settings, clock=clock),
        refresh_tokens=RefreshTokenManager(
            store=uow.refresh_tokens,
            clock=clock,
            max_sessions=settings.max_sessions,
            default_ttl=settings.refresh_expires,
        ),
        settings=settings,
        clock=clock,
        checkpoint=uow.commit,
    )


def get_transport() -> FlaskCookieTransport:
    """Return the request's cookie transport, created on first use."""
    transport = g.get("credential_transport")
    if transport is None:
        transport = FlaskCookieTransport(
            request=request, policy=CookiePolicy.from_config(current_app.config)
        )
        g.credential_transport = transport
    return transport


def init_app(app: Flask) -> None:
    """Authenticate every request from its access cookie; flush cookie writes."""

    @app.before_request
    def _authenticate() -> None:
        g.auth = None
        transport = get_transport()
        if transport.get_access_token() is None:
            return
        service = build_session_service(open_uow())
        g.auth = service.authenticate(transport)

    @app.after_request
    def _write_cookies(response: Response) -> Response:
        transport = g.get("credential_transport")
        if transport is None:
            return response
        # A failed request writes nothing, not even a renewed access cookie
        if response.status_code >= 400:
            transport.discard()
        else:
            transport.apply(response)
        return response


# ------------------------------- Auth guards ----------------------------------


def current_claims() -> dict[str, Any] | None:
    """Claims of the verified access token, or ``None`` when anonymous."""
    return g.get("auth")


def current_identity() -> str | None:
    """User id of the authenticated caller, or ``None`` when anonymous."""
    return SessionService.resolve_identity(current_claims())


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        if current_identity() is None:
            raise Unauthorized("Authentication required")
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


# ------------------------------- Responses ------------------------------------


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
