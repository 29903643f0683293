"""Database layer for spendtrack application."""

from spendtrack.database.base import (
    Database,
    StoreError,
    TransactionWriter,
    UniqueViolationError,
)
from spendtrack.database.factories import create_sqlite_database
from spendtrack.database.sqlalchemy_db import SQLAlchemyDatabase

__all__ = [
    "Database",
    "StoreError",
    "TransactionWriter",
    "UniqueViolationError",
    "SQLAlchemyDatabase",
    "create_sqlite_database",
]
