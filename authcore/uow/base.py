"""
Abstract Unit of Work contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from authcore.services._shared.ports.refresh_token_store import RefreshTokenStore


class UnitOfWork(ABC):
    """
    Coordinates a transactional boundary for a use-case.

    Responsibilities:
    - Provide the refresh token store bound to the same transaction.
    - Commit on success, rollback on error.
    """

    refresh_tokens: RefreshTokenStore

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...


class StoreUnitOfWork(UnitOfWork):
    """
    Unit of Work around a store that applies each operation immediately
    (in-memory or Redis). Commit and rollback are no-ops.
    """

    def __init__(self, store: RefreshTokenStore) -> None:
        self.refresh_tokens = store

    def __enter__(self) -> StoreUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None

    def commit(self) -> None:
        return None

    def rollback(self) -> None:
        return None
