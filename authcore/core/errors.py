"""RFC 7807 (``application/problem+json``) error responses for the API."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from sqlalchemy.exc import OperationalError
from werkzeug.exceptions import HTTPException

from authcore.core.logger import ensure_request_id

log = logging.getLogger(__name__)

#: Stable machine-readable codes per HTTP status; anything else is ``"error"``.
STATUS_CODES = {
    400: "bad_request",
    401: "unauthorized",
    404: "not_found",
    405: "method_not_allowed",
    415: "unsupported_media_type",
    500: "internal_server_error",
    503: "service_unavailable",
}


class APIError(Exception):
    """
    An error that renders as a problem document.

    :param message: Client-safe summary, rendered as ``detail``.
    :param status_code: HTTP status (default 400).
    :param code: Stable snake_case code; derived from the status when omitted.
    :param details: Optional structured, client-safe payload.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code or STATUS_CODES.get(self.status_code, "error")
        self.details = details or {}


class Unauthorized(APIError):
    """401: no usable credential. Never says which check failed."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED)


class ServiceUnavailable(APIError):
    """503: a backing store cannot be reached."""

    def __init__(self, message: str = "Service temporarily unavailable") -> None:
        super().__init__(message, status_code=HTTPStatus.SERVICE_UNAVAILABLE)


def problem_response(err: APIError) -> Response:
    """
    Render ``err`` as a problem document.

    Auth answers must never be cached by intermediaries, so every problem
    response carries ``Cache-Control: no-store``.
    """
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(err.status_code).phrase,
        "status": err.status_code,
        "detail": err.message,
        "instance": request.path,
        "code": err.code,
        "request_id": ensure_request_id(),
    }
    if err.details:
        problem["details"] = err.details
    resp = jsonify(problem)
    resp.status_code = err.status_code
    resp.mimetype = "application/problem+json"
    resp.headers["Cache-Control"] = "no-store"
    return resp


def _log(err: APIError, *, exc_info: bool = False) -> None:
    level = logging.ERROR if err.status_code >= 500 else logging.WARNING
    log.log(
        level,
        "request failed: code=%s status=%s detail=%s",
        err.code,
        err.status_code,
        err.message,
        exc_info=exc_info,
    )


def init_app(app: Flask) -> None:
    """
    Attach problem+json handlers to ``app``.

    Service errors go through ``BaseService.translate_exceptions``; the
    precise failure (expired, consumed, unknown...) is logged with its
    ``reason`` but the client only ever sees the translated message.
    """
    from authcore.services._shared.base import BaseService
    from authcore.services._shared.errors import ServiceError

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        _log(err)
        return problem_response(err)

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        log.info(
            "service error: %s",
            type(err).__name__,
            extra={"reason": getattr(err, "reason", None)},
        )
        translated = BaseService.translate_exceptions(err)
        if not isinstance(translated, APIError):
            translated = APIError("Unexpected error", status_code=500)
        _log(translated)
        return problem_response(translated)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        message = (err.description or HTTPStatus(status).phrase).strip()
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        translated = APIError(message, status_code=status)
        _log(translated)
        return problem_response(translated)

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        # Lost DB connectivity outside the store adapters (e.g. commit)
        translated = ServiceUnavailable()
        _log(translated, exc_info=True)
        return problem_response(translated)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        translated = APIError("Unexpected error", status_code=500)
        _log(translated, exc_info=True)
        return problem_response(translated)
