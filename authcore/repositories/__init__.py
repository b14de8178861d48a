from authcore.repositories.base import BaseRepository
from authcore.repositories.refresh_token import SQLAlchemyRefreshTokenStore

__all__ = ["BaseRepository", "SQLAlchemyRefreshTokenStore"]
