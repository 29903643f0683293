"""Shared pytest fixtures for spendtrack tests."""

import tempfile
import os
from pathlib import Path
import pytest

from spendtrack.database.factories import create_sqlite_database
from spendtrack.domain.csv_import import ImportService
from spendtrack.domain.import_session import ImportSessionTracker
from spendtrack.domain.transaction import TransactionService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def import_service(temp_db):
    """Create an ImportService with a temporary database."""
    return ImportService(temp_db)


@pytest.fixture
def session_tracker(temp_db):
    """Create an ImportSessionTracker with a temporary database."""
    return ImportSessionTracker(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def sample_csv():
    """Three well-formed rows in canonical column order."""
    return (
        b"Date,Amount,Description,Category\n"
        b"2025-01-01,-50.00,Grocery Store,Food\n"
        b"2025-01-02,2500.00,Salary,Income\n"
        b"2025-01-03,-12.50,Coffee Shop,\n"
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
