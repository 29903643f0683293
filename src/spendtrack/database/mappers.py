"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the domain entities stay
stable when the database schema changes.
"""

from decimal import Decimal

from spendtrack.domain import entities as domain
from spendtrack.database.models import (
    ImportSession as ORMImportSession,
    Transaction as ORMTransaction,
)


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        date=orm_transaction.date,
        amount=Decimal(orm_transaction.amount),
        description=orm_transaction.description,
        category=orm_transaction.category,
        created_at=orm_transaction.created_at,
    )


def candidate_to_orm(candidate: domain.NormalizedTransaction) -> ORMTransaction:
    """Build an unsaved SQLAlchemy Transaction from a parsed candidate."""
    return ORMTransaction(
        date=candidate.date,
        amount=candidate.amount,
        description=candidate.description,
        category=candidate.category,
    )


def import_session_to_domain(orm_session: ORMImportSession) -> domain.ImportSession:
    """Convert SQLAlchemy ImportSession model to domain ImportSession entity."""
    return domain.ImportSession(
        id=orm_session.id,
        filename=orm_session.filename,
        started_at=orm_session.started_at,
        completed_at=orm_session.completed_at,
        total_rows=orm_session.total_rows,
        imported_count=orm_session.imported_count,
        duplicate_count=orm_session.duplicate_count,
        error_count=orm_session.error_count,
        status=domain.SessionStatus(orm_session.status),
        error_message=orm_session.error_message,
    )
