"""Transaction domain service."""

import logging
from typing import Optional
from datetime import date
from decimal import Decimal
from spendtrack.database.base import Database
from spendtrack.domain.entities import Transaction as TransactionEntity
from spendtrack.domain.errors import ValidationError

logger = logging.getLogger(__name__)


class TransactionService:
    """Service for reading and deleting persisted transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[TransactionEntity]:
        """List transactions with optional filters.

        Args:
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)
            category: Optional exact category filter
            limit: Optional maximum number of transactions
            offset: Number of transactions to skip

        Returns:
            List of transaction entities, newest first

        Raises:
            ValidationError: If start_date is after end_date
        """
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError("Start date must be on or before end date")
        return self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            category=category,
            limit=limit,
            offset=offset,
        )

    def count_transactions(self) -> int:
        return self.db.count_transactions()

    def find_duplicate(self, date: date, amount: Decimal, description: str) -> Optional[int]:
        """Return the ID of the transaction sharing this natural key, if any."""
        return self.db.find_transaction_id(date, amount, description)

    def delete_transaction(self, transaction_id: int) -> bool:
        """Delete a transaction.

        Deleting an absent ID is not an error.

        Returns:
            True if a transaction was deleted, False if none had that ID
        """
        deleted = self.db.delete_transaction(transaction_id) > 0
        if deleted:
            logger.info("Deleted transaction %d", transaction_id)
        else:
            logger.debug("Transaction %d not found, nothing deleted", transaction_id)
        return deleted
