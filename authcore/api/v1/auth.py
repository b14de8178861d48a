"""Session endpoints: refresh rotation, sign-out and identity."""

from __future__ import annotations

from flask import Blueprint, Response

from authcore.api.deps import (
    build_session_service,
    current_claims,
    current_identity,
    get_transport,
    json_response,
    open_uow,
    require_auth,
    timing,
)
from authcore.schemas import SessionOutSchema, SignOutAllOutSchema, WhoAmISchema
from authcore.services._shared.errors import AuthError

bp = Blueprint("auth", __name__, url_prefix="/auth")

session_schema = SessionOutSchema()
signout_all_schema = SignOutAllOutSchema()
whoami_schema = WhoAmISchema()


@bp.post("/refresh")
@timing
def refresh():
    """Rotate the refresh cookie and issue a new access cookie."""

    uow = open_uow()
    with uow:
        service = build_session_service(uow)
        try:
            pair = service.refresh(get_transport())
        except AuthError:
            # Keep the purge of an expired record before answering 401
            uow.commit()
            raise
    return json_response({"data": session_schema.dump(pair)})


@bp.post("/signout")
@timing
def signout():
    """Revoke the presented refresh cookie and clear both cookies."""

    uow = open_uow()
    with uow:
        build_session_service(uow).sign_out(get_transport())
    return Response(status=204)


@bp.post("/signout-all")
@require_auth
@timing
def signout_all():
    """Revoke every session of the caller."""

    uow = open_uow()
    with uow:
        revoked = build_session_service(uow).sign_out_everywhere(
            current_identity(), get_transport()
        )
    return json_response({"data": signout_all_schema.dump({"revoked": revoked})})


@bp.get("/whoami")
@require_auth
@timing
def whoami():
    """Return the identity carried by the access cookie."""

    claims = current_claims() or {}
    body = {"data": whoami_schema.dump({"id": current_identity(), "exp": claims.get("exp")})}
    return json_response(body)
