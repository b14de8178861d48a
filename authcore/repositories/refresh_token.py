"""Relational refresh token store."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, select

from authcore.models.refresh_token import RefreshToken
from authcore.repositories.base import BaseRepository
from authcore.services._shared.ports.refresh_token_store import RefreshTokenView


class SQLAlchemyRefreshTokenStore(BaseRepository[RefreshToken]):
    """
    :class:`~authcore.services._shared.ports.RefreshTokenStore` over the
    ``refresh_tokens`` table.

    Deletes are issued as single ``DELETE`` statements so their rowcount is
    authoritative: two requests racing on ``delete_by_hash`` see 1 and 0.
    """

    model = RefreshToken

    def create(self, *, user_id: str, token_hash: str, expires_at: int) -> int:
        with self._guard():
            row = self.add(
                RefreshToken(user_id=user_id, token_hash=token_hash, expires_at=int(expires_at))
            )
            return row.id

    def get_tokens_by_user_id(self, user_id: str) -> list[int]:
        stmt = (
            select(RefreshToken.id)
            .where(RefreshToken.user_id == user_id)
            .order_by(RefreshToken.id.desc())
        )
        with self._guard():
            return list(self.session.scalars(stmt))

    def delete_tokens(self, ids: Iterable[int]) -> int:
        doomed = list(ids)
        if not doomed:
            return 0
        stmt = delete(RefreshToken).where(RefreshToken.id.in_(doomed))
        return self._delete(stmt)

    def delete_expired_for_user(self, user_id: str, now: int) -> int:
        stmt = delete(RefreshToken).where(
            RefreshToken.user_id == user_id, RefreshToken.expires_at < int(now)
        )
        return self._delete(stmt)

    def get_by_hash(self, token_hash: str) -> RefreshTokenView | None:
        stmt = select(RefreshToken.user_id, RefreshToken.expires_at).where(
            RefreshToken.token_hash == token_hash
        )
        with self._guard():
            row = self.session.execute(stmt).first()
        if row is None:
            return None
        return RefreshTokenView(user_id=row.user_id, expires_at=int(row.expires_at))

    def delete_by_hash(self, token_hash: str) -> int:
        return self._delete(delete(RefreshToken).where(RefreshToken.token_hash == token_hash))

    def delete_all_for_user(self, user_id: str) -> int:
        return self._delete(delete(RefreshToken).where(RefreshToken.user_id == user_id))

    def _delete(self, stmt) -> int:
        with self._guard():
            result = self.session.execute(stmt.execution_options(synchronize_session=False))
            return int(result.rowcount or 0)
