"""Duplicate detection and atomic batch commit of candidate transactions."""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from spendtrack.database.base import Database, StoreError, UniqueViolationError
from spendtrack.domain.entities import DuplicateInfo, NormalizedTransaction, Transaction
from spendtrack.domain.errors import CommitFault

logger = logging.getLogger(__name__)

Candidate = tuple[int, NormalizedTransaction]


@dataclass
class CommitOutcome:
    """Rows inserted and rows reported as duplicates by one commit."""

    imported: list[Transaction] = field(default_factory=list)
    duplicates: list[DuplicateInfo] = field(default_factory=list)


def duplicate_info(row: int, candidate: NormalizedTransaction, existing_id: Optional[int]) -> DuplicateInfo:
    return DuplicateInfo(
        row=row,
        date=candidate.date,
        amount=candidate.amount,
        description=candidate.description,
        existing_id=existing_id,
    )


class Deduplicator:
    """Read-only duplicate check used for dry runs.

    Besides the store, keys seen earlier in the same file count as
    duplicates, mirroring what the unique constraint would do on insert.
    """

    def __init__(self, db: Database):
        self.db = db
        self._seen: set[tuple] = set()

    def check(self, row: int, candidate: NormalizedTransaction) -> Optional[DuplicateInfo]:
        """Return duplicate info for the candidate, or None if it is new."""
        existing_id = self.db.find_transaction_id(
            candidate.date, candidate.amount, candidate.description
        )
        key = candidate.natural_key
        if existing_id is None and key not in self._seen:
            self._seen.add(key)
            return None
        return duplicate_info(row, candidate, existing_id)


class BatchCommitter:
    """Persist one import call's candidates inside a single store transaction."""

    def __init__(self, db: Database):
        """Initialize batch committer.

        Args:
            db: Database instance
        """
        self.db = db

    def commit(self, candidates: Sequence[Candidate], dry_run: bool = False) -> CommitOutcome:
        """Insert candidates in row order, classifying each as imported or duplicate.

        A uniqueness violation only undoes the offending insert. Any other
        store failure undoes every insert of the call.

        Args:
            candidates: (row number, candidate) pairs
            dry_run: Check for duplicates without writing anything

        Returns:
            CommitOutcome with imported transactions and duplicates

        Raises:
            CommitFault: If the store failed for a reason other than uniqueness
        """
        if dry_run:
            return self._dry_run(candidates)

        outcome = CommitOutcome()
        try:
            with self.db.atomic() as unit:
                for row, candidate in candidates:
                    try:
                        outcome.imported.append(unit.insert_transaction(candidate))
                    except UniqueViolationError:
                        existing_id = unit.find_transaction_id(
                            candidate.date, candidate.amount, candidate.description
                        )
                        outcome.duplicates.append(duplicate_info(row, candidate, existing_id))
        except StoreError as e:
            logger.error("Batch of %d rows rolled back: %s", len(candidates), e)
            raise CommitFault(f"Import failed, no transactions were saved: {e}") from e

        logger.debug(
            "Committed %d transactions, %d duplicates",
            len(outcome.imported),
            len(outcome.duplicates),
        )
        return outcome

    def _dry_run(self, candidates: Sequence[Candidate]) -> CommitOutcome:
        deduplicator = Deduplicator(self.db)
        outcome = CommitOutcome()
        try:
            for row, candidate in candidates:
                duplicate = deduplicator.check(row, candidate)
                if duplicate is not None:
                    outcome.duplicates.append(duplicate)
        except StoreError as e:
            raise CommitFault(f"Duplicate check failed: {e}") from e
        return outcome
