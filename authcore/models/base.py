"""Reusable SQLAlchemy mixins shared by models (typed 2.0)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column


class CreatedAtMixin:
    """Provide an insert-only ``created_at`` column.

    Attributes
    ----------
    created_at:
        Timezone-aware timestamp filled by the database on insert.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class PKMixin:
    """Expose an integer surrogate primary key column named ``id``.

    Ids grow monotonically, which the session cap relies on to tell the
    newest records apart.
    """

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)


class ReprMixin:
    """Provide a concise ``__repr__`` including the class name and id."""

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        key = getattr(self, "id", None)
        return f"<{cls} id={key}>"
