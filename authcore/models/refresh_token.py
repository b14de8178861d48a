"""Persisted refresh token records."""

from __future__ import annotations

from sqlalchemy import Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from authcore.core.extensions import db

from .base import CreatedAtMixin, PKMixin, ReprMixin


class RefreshToken(PKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    One live session: the digest of an opaque refresh credential.

    The raw credential is never stored; lookups go through ``token_hash``.

    Fields
    ------
    user_id : str
        Owner identity (opaque string, up to 64 chars).
    token_hash : str
        Lowercase hex SHA-256 of the raw credential. Unique.
    expires_at : int
        Expiry instant in epoch seconds.
    created_at : datetime
        Insert timestamp (from mixin).
    """

    __tablename__ = "refresh_tokens"

    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    expires_at: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("token_hash", name="uq_refresh_tokens_token_hash"),
        Index("ix_refresh_tokens_user_id_expires_at", "user_id", "expires_at"),
        Index("ix_refresh_tokens_expires_at", "expires_at"),
    )
