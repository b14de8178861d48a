"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from marshmallow import EXCLUDE, Schema, ValidationError, fields, post_load, validate

from authcore.services._shared.errors import ConfigurationError
from authcore.services.auth.dto import SUPPORTED_ALGORITHMS, AuthSettings


class AuthSettingsSchema(Schema):
    """
    Load :class:`AuthSettings` from a Flask config mapping.

    Keys are the config names (``JWT_SECRET_KEY``...); any other key in the
    mapping is ignored.
    """

    class Meta:
        unknown = EXCLUDE

    secret = fields.String(
        data_key="JWT_SECRET_KEY",
        required=True,
        validate=validate.Length(min=1, error="JWT secret is not set"),
        error_messages={"required": "JWT secret is not set", "null": "JWT secret is not set"},
    )
    algorithm = fields.String(
        data_key="JWT_ALGORITHM",
        load_default="HS256",
        validate=validate.OneOf(sorted(SUPPORTED_ALGORITHMS)),
    )
    access_expires = fields.Integer(
        data_key="ACCESS_TOKEN_EXPIRES", load_default=3600, validate=validate.Range(min=1)
    )
    refresh_threshold = fields.Integer(
        data_key="ACCESS_TOKEN_REFRESH_THRESHOLD", load_default=600, validate=validate.Range(min=0)
    )
    refresh_expires = fields.Integer(
        data_key="REFRESH_TOKEN_EXPIRES", load_default=604800, validate=validate.Range(min=1)
    )
    max_sessions = fields.Integer(
        data_key="MAX_SESSIONS_PER_USER", load_default=2, validate=validate.Range(min=1)
    )

    @post_load
    def make_settings(self, data: dict[str, Any], **_: Any) -> AuthSettings:
        return AuthSettings(**data)


def load_auth_settings(config: Mapping[str, Any]) -> AuthSettings:
    """
    Validate the auth subset of ``config`` once.

    :raises ConfigurationError: With every offending key listed.
    """
    keys = {field.data_key for field in AuthSettingsSchema().fields.values()}
    raw = {k: config[k] for k in keys if k in config}
    try:
        return AuthSettingsSchema().load(raw)
    except ValidationError as exc:
        problems = "; ".join(
            f"{key}: {', '.join(map(str, msgs)) if isinstance(msgs, list) else msgs}"
            for key, msgs in sorted(exc.normalized_messages().items())
        )
        raise ConfigurationError(f"Invalid auth configuration ({problems})") from exc


class SessionOutSchema(Schema):
    """Response payload after a session is started or refreshed."""

    access_expires_at = fields.Integer(required=True)
    refresh_expires_at = fields.Integer(required=True)


class WhoAmISchema(Schema):
    """Response payload exposing the authenticated identity."""

    id = fields.String(required=True)
    exp = fields.Integer(allow_none=True)


class SignOutAllOutSchema(Schema):
    """Response payload after revoking every session of the caller."""

    revoked = fields.Integer(required=True)
