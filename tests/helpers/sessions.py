"""Helpers issuing credentials through the real service wiring."""

from __future__ import annotations

from flask import Flask

from authcore.api.deps import build_session_service, open_uow
from authcore.services._shared.ports import InMemoryCredentialTransport
from authcore.services.auth.dto import TokenPairOut


def start_session(app: Flask, user_id: str) -> TokenPairOut:
    """Issue and persist a credential pair for ``user_id`` (what sign-in does)."""

    with app.test_request_context():
        uow = open_uow()
        with uow:
            return build_session_service(uow).start_session(user_id, InMemoryCredentialTransport())


def login(client, pair: TokenPairOut) -> None:
    """Install ``pair`` as the test client's cookies."""

    client.set_cookie("access_token", pair.access_token)
    client.set_cookie("refresh_token", pair.refresh_token)
