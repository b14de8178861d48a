"""Repository base for SQLAlchemy 2.x.

Repositories stay persistence-only: no business rules, and never
commit/rollback. The Unit of Work owns the transaction boundary.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Generic, TypeVar, cast

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from authcore.core.extensions import db
from authcore.services._shared.errors import StoreUnavailableError

E = TypeVar("E")  # SQLAlchemy mapped entity type


class BaseRepository(Generic[E]):
    """Generic, persistence-only repository for a single aggregate.

    Subclasses MUST define ``model``, the SQLAlchemy mapped class.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """Initialise the repository with an optional SQLAlchemy session.

        When no explicit session is provided the repository falls back to the
        Flask-scoped session exposed by ``authcore.core.extensions``.

        :param session: Session shared across the Unit of Work scope.
        :type session: :class:`sqlalchemy.orm.Session` | None
        """
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        """Return the injected session, or the Flask-scoped one."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    def add(self, instance: E) -> E:
        """Attach ``instance`` to the session and flush to obtain its id."""
        self.session.add(instance)
        self.flush()
        return instance

    def flush(self) -> None:
        self.session.flush()

    @contextmanager
    def _guard(self) -> Iterator[None]:
        """Surface lost database connectivity as :class:`StoreUnavailableError`."""
        try:
            yield
        except OperationalError as exc:
            raise StoreUnavailableError() from exc
