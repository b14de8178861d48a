from authcore.uow.base import StoreUnitOfWork, UnitOfWork
from authcore.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

__all__ = ["SQLAlchemyUnitOfWork", "StoreUnitOfWork", "UnitOfWork"]
