"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    AuthSettingsSchema,
    SessionOutSchema,
    SignOutAllOutSchema,
    WhoAmISchema,
    load_auth_settings,
)

__all__ = [
    "AuthSettingsSchema",
    "SessionOutSchema",
    "SignOutAllOutSchema",
    "WhoAmISchema",
    "load_auth_settings",
]
