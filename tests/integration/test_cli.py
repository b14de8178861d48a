"""Integration tests for the ``flask auth`` command group."""

from __future__ import annotations

from tests.helpers.sessions import start_session


def test_sessions_counts_live_records(app, session, clock):
    start_session(app, "42")
    start_session(app, "42")

    result = app.test_cli_runner().invoke(args=["auth", "sessions", "42"])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == "2"


def test_revoke_user(app, session, clock):
    start_session(app, "42")
    runner = app.test_cli_runner()

    result = runner.invoke(args=["auth", "revoke-user", "42"])

    assert result.exit_code == 0, result.output
    assert "Revoked 1 session(s) for 42" in result.output
    assert runner.invoke(args=["auth", "sessions", "42"]).output.strip() == "0"


def test_purge_expired(app, session, clock):
    start_session(app, "42")
    clock.advance(7 * 24 * 3600 + 1)

    result = app.test_cli_runner().invoke(args=["auth", "purge-expired", "42"])

    assert result.exit_code == 0, result.output
    assert "Purged 1 expired token(s) for 42" in result.output
