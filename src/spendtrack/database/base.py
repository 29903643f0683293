"""Abstract ledger store interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional, Any
from datetime import date, datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from spendtrack.domain.entities import (
    ImportSession,
    NormalizedTransaction,
    SessionStatus,
    Transaction,
)


class StoreError(Exception):
    """Store-level failure (constraint, connectivity, I/O)."""


class UniqueViolationError(StoreError):
    """Insert rejected by the natural-key uniqueness constraint."""


class TransactionWriter(ABC):
    """Writes performed inside one atomic store transaction."""

    @abstractmethod
    def insert_transaction(self, candidate: NormalizedTransaction) -> Transaction:
        """Insert a transaction.

        Raises:
            UniqueViolationError: If the natural key already exists. Only the
                failed statement is undone; earlier inserts stay pending.
            StoreError: For any other store failure.
        """
        pass

    @abstractmethod
    def find_transaction_id(self, date: date, amount: Decimal, description: str) -> Optional[int]:
        """Look up a transaction by natural key, seeing this unit's own inserts."""
        pass


class Database(ABC):
    """Abstract database interface for spendtrack."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Transaction operations
    @abstractmethod
    def atomic(self) -> AbstractContextManager[TransactionWriter]:
        """Open one store transaction for a batch of inserts.

        The transaction commits when the block exits normally and rolls back
        entirely when an exception leaves the block.
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def find_transaction_id(self, date: date, amount: Decimal, description: str) -> Optional[int]:
        """Get the ID of the transaction with the given natural key."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Transaction]:
        """List transactions with optional filters, newest first."""
        pass

    @abstractmethod
    def count_transactions(self) -> int:
        """Count persisted transactions."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> int:
        """Delete a transaction. Returns the number of rows removed."""
        pass

    # Import session operations
    @abstractmethod
    def create_import_session(self, filename: str, total_rows: int) -> ImportSession:
        """Create a pending import session."""
        pass

    @abstractmethod
    def get_import_session(self, session_id: int) -> Optional[ImportSession]:
        """Get import session by ID."""
        pass

    @abstractmethod
    def finish_import_session(
        self,
        session_id: int,
        status: SessionStatus,
        completed_at: datetime,
        imported_count: Optional[int] = None,
        duplicate_count: Optional[int] = None,
        error_count: Optional[int] = None,
        error_message: Optional[str] = None,
    ) -> int:
        """Move a pending session to a terminal status.

        Only sessions still pending are updated. Returns the number of rows
        changed (0 when the session is missing or already terminal).
        """
        pass

    @abstractmethod
    def list_import_sessions(
        self,
        status: Optional[SessionStatus] = None,
        filename: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[ImportSession]:
        """List import sessions, most recently started first."""
        pass

    @abstractmethod
    def get_last_successful_import(self) -> Optional[ImportSession]:
        """Get the most recently completed session that imported rows."""
        pass

    @abstractmethod
    def count_import_sessions(self, status: Optional[SessionStatus] = None) -> int:
        """Count import sessions, optionally by status."""
        pass

    @abstractmethod
    def get_import_session_totals(self) -> dict[str, Any]:
        """Aggregate session counts per status and summed counters.

        Returns a dictionary with total_sessions, completed_sessions,
        failed_sessions, pending_sessions, total_imported, total_duplicates
        and total_errors.
        """
        pass

    @abstractmethod
    def delete_import_session(self, session_id: int) -> int:
        """Delete an import session. Returns the number of rows removed."""
        pass

    @abstractmethod
    def delete_import_sessions_before(self, cutoff: datetime) -> int:
        """Delete sessions started before ``cutoff``. Returns rows removed."""
        pass
