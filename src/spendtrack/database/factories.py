"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from spendtrack.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV_VAR = "SPENDTRACK_DB_PATH"


def default_database_path() -> str:
    """Return ~/.spendtrack/spendtrack.db, creating the directory if needed."""
    db_dir = Path.home() / ".spendtrack"
    db_dir.mkdir(exist_ok=True)
    return str(db_dir / "spendtrack.db")


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks SPENDTRACK_DB_PATH
            environment variable, then defaults to ~/.spendtrack/spendtrack.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get(DB_PATH_ENV_VAR)

    if database_path is None:
        database_path = default_database_path()

    return SQLAlchemyDatabase(f"sqlite:///{database_path}")
