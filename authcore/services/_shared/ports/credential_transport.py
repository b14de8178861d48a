from __future__ import annotations

from typing import Protocol


class CredentialTransport(Protocol):
    """
    Port for the layer that carries credentials between client and server.

    Values are opaque: implementations must not inspect or transform them.
    Refresh credentials must be stored out of reach of client-side scripts
    and only sent over secure channels.
    """

    def get_access_token(self) -> str | None: ...
    def set_access_token(self, token: str, expires_at: int) -> None: ...
    def clear_access_token(self) -> None: ...

    def get_refresh_token(self) -> str | None: ...
    def set_refresh_token(self, token: str, expires_at: int) -> None: ...
    def clear_refresh_token(self) -> None: ...


class InMemoryCredentialTransport(CredentialTransport):
    """Dictionary-backed transport used in unit tests."""

    def __init__(
        self,
        *,
        access_token: str | None = None,
        refresh_token: str | None = None,
    ) -> None:
        self.values: dict[str, str] = {}
        self.expires: dict[str, int] = {}
        self.writes: list[str] = []
        if access_token is not None:
            self.values["access_token"] = access_token
        if refresh_token is not None:
            self.values["refresh_token"] = refresh_token

    def _set(self, name: str, value: str, expires_at: int) -> None:
        self.values[name] = value
        self.expires[name] = expires_at
        self.writes.append(name)

    def _clear(self, name: str) -> None:
        self.values.pop(name, None)
        self.expires.pop(name, None)
        self.writes.append(name)

    def get_access_token(self) -> str | None:
        return self.values.get("access_token")

    def set_access_token(self, token: str, expires_at: int) -> None:
        self._set("access_token", token, expires_at)

    def clear_access_token(self) -> None:
        self._clear("access_token")

    def get_refresh_token(self) -> str | None:
        return self.values.get("refresh_token")

    def set_refresh_token(self, token: str, expires_at: int) -> None:
        self._set("refresh_token", token, expires_at)

    def clear_refresh_token(self) -> None:
        self._clear("refresh_token")
