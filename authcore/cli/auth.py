"""Flask CLI commands for refresh token administration."""

from __future__ import annotations

import click
from flask.cli import with_appcontext

from authcore.api.deps import get_auth_settings, get_clock, open_uow
from authcore.services.refresh_tokens.service import RefreshTokenManager
from authcore.uow import UnitOfWork


def _manager(uow: UnitOfWork) -> RefreshTokenManager:
    settings = get_auth_settings()
    return RefreshTokenManager(
        store=uow.refresh_tokens,
        clock=get_clock(),
        max_sessions=settings.max_sessions,
        default_ttl=settings.refresh_expires,
    )


@click.group("auth")
def auth_cli() -> None:
    """Refresh token administration commands."""


@auth_cli.command("revoke-user")
@click.argument("user_id")
@with_appcontext
def revoke_user(user_id: str) -> None:
    """Revoke every refresh token of USER_ID (signs the user out everywhere)."""
    with open_uow() as uow:
        count = _manager(uow).revoke_all_for_user(user_id)
    click.echo(f"Revoked {count} session(s) for {user_id}")


@auth_cli.command("purge-expired")
@click.argument("user_id")
@with_appcontext
def purge_expired(user_id: str) -> None:
    """Delete the expired refresh tokens of USER_ID."""
    with open_uow() as uow:
        count = _manager(uow).purge_expired(user_id)
    click.echo(f"Purged {count} expired token(s) for {user_id}")


@auth_cli.command("sessions")
@click.argument("user_id")
@with_appcontext
def sessions(user_id: str) -> None:
    """Print how many live sessions USER_ID holds."""
    with open_uow() as uow:
        count = _manager(uow).count_sessions(user_id)
    click.echo(str(count))
