"""
Explicit success/failure values for the token services.

Permissive operations (``SignedTokenIssuer.decode``,
``RefreshTokenManager.check``) return a :data:`Result` instead of raising, so
callers decide at the call site whether a failure falls through to
"unauthenticated" or aborts the request. Strict variants are thin
``unwrap()`` wrappers around them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeAlias, TypeVar

from authcore.services._shared.errors import AuthError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Successful outcome.

    :ivar value: Payload produced by the operation.
    """

    value: T

    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Return the payload."""
        return self.value


@dataclass(frozen=True, slots=True)
class Err:
    """
    Failed outcome carrying one of the named auth error kinds.

    :ivar error: The error instance (``InvalidTokenError``, ``ExpiredTokenError``...).
    """

    error: AuthError

    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        """Raise the carried error."""
        raise self.error


Result: TypeAlias = Ok[T] | Err

__all__ = ["Ok", "Err", "Result"]
