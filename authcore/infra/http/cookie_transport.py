"""Cookie-backed credential transport for Flask requests."""

from __future__ import annotations

from dataclasses import dataclass, field

from flask import Request, Response

from authcore.services._shared.ports import CredentialTransport


@dataclass(frozen=True, slots=True)
class CookiePolicy:
    """
    Names and attributes shared by both credential cookies.

    :param access_name: Access token cookie name.
    :param refresh_name: Refresh token cookie name.
    :param secure: ``Secure`` attribute. Only local plain-HTTP setups disable it.
    :param samesite: ``SameSite`` attribute.
    """

    access_name: str = "access_token"
    refresh_name: str = "refresh_token"
    secure: bool = True
    samesite: str = "Strict"
    path: str = "/"

    @classmethod
    def from_config(cls, config) -> CookiePolicy:
        return cls(
            access_name=config.get("ACCESS_COOKIE_NAME", "access_token"),
            refresh_name=config.get("REFRESH_COOKIE_NAME", "refresh_token"),
            secure=bool(config.get("COOKIE_SECURE", True)),
            samesite=config.get("COOKIE_SAMESITE", "Strict"),
        )


@dataclass(slots=True)
class FlaskCookieTransport(CredentialTransport):
    """
    Read credentials from request cookies and queue writes for the response.

    Writes are applied by :meth:`apply` (wired into ``after_request``), so a
    request that fails before the response is built writes nothing. Reads
    reflect queued writes: a token set earlier in the request is what later
    code sees.
    """

    request: Request
    policy: CookiePolicy = field(default_factory=CookiePolicy)
    #: name -> (value, expires_at); ``None`` marks a deletion
    pending: dict[str, tuple[str, int] | None] = field(default_factory=dict)

    def _get(self, name: str) -> str | None:
        if name in self.pending:
            queued = self.pending[name]
            return queued[0] if queued is not None else None
        return self.request.cookies.get(name) or None

    def get_access_token(self) -> str | None:
        return self._get(self.policy.access_name)

    def set_access_token(self, token: str, expires_at: int) -> None:
        self.pending[self.policy.access_name] = (token, int(expires_at))

    def clear_access_token(self) -> None:
        self.pending[self.policy.access_name] = None

    def get_refresh_token(self) -> str | None:
        return self._get(self.policy.refresh_name)

    def set_refresh_token(self, token: str, expires_at: int) -> None:
        self.pending[self.policy.refresh_name] = (token, int(expires_at))

    def clear_refresh_token(self) -> None:
        self.pending[self.policy.refresh_name] = None

    def apply(self, response: Response) -> Response:
        """Write queued cookies onto ``response``."""
        for name, queued in self.pending.items():
            if queued is None:
                response.delete_cookie(
                    name,
                    path=self.policy.path,
                    secure=self.policy.secure,
                    httponly=True,
                    samesite=self.policy.samesite,
                )
                continue
            value, expires_at = queued
            response.set_cookie(
                name,
                value,
                expires=expires_at,
                path=self.policy.path,
                secure=self.policy.secure,
                httponly=True,
                samesite=self.policy.samesite,
            )
        self.pending.clear()
        return response

    def discard(self) -> None:
        """Drop queued writes; the response leaves the client's cookies as they were."""
        self.pending.clear()
