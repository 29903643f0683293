"""Domain model entities for spendtrack.

These are pure data classes representing import pipeline concepts,
independent of the database schema. The store layer converts its rows into
these entities through the mappers in ``spendtrack.database.mappers``.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

RawRow = dict[str, str]


class SessionStatus(str, Enum):
    """Lifecycle states of an import session."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class NormalizedTransaction:
    """Parsed candidate transaction, not yet persisted."""

    date: date
    amount: Decimal
    description: str
    category: Optional[str] = None

    @property
    def natural_key(self) -> tuple[date, Decimal, str]:
        return (self.date, self.amount, self.description)


@dataclass(frozen=True)
class Transaction:
    """Persisted transaction domain entity."""

    id: int
    date: date
    amount: Decimal
    description: str
    category: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class ImportSession:
    """Provenance record of one import call."""

    id: int
    filename: str
    started_at: datetime
    completed_at: Optional[datetime]
    total_rows: int
    imported_count: int
    duplicate_count: int
    error_count: int
    status: SessionStatus
    error_message: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status is not SessionStatus.PENDING


@dataclass(frozen=True)
class DuplicateInfo:
    """A source row that matched an already-persisted transaction.

    ``existing_id`` is None only in validate-only runs, for a row that
    repeats an earlier row of the same file.
    """

    row: int
    date: date
    amount: Decimal
    description: str
    existing_id: Optional[int]


@dataclass(frozen=True)
class ImportRowError:
    """Row-level failure collected during parsing."""

    row: int
    message: str
    data: RawRow
    field: Optional[str] = None


@dataclass(frozen=True)
class ImportOptions:
    """Caller-supplied switches for one import call."""

    skip_duplicates: bool = True
    validate_only: bool = False


@dataclass(frozen=True)
class ImportResult:
    """Everything an import call reports back to its caller."""

    session: ImportSession
    imported: list[Transaction] = field(default_factory=list)
    duplicates: list[DuplicateInfo] = field(default_factory=list)
    errors: list[ImportRowError] = field(default_factory=list)
    options: ImportOptions = field(default_factory=ImportOptions)

    @property
    def accepted(self) -> bool:
        """Whether the caller should treat this import as successful."""
        if self.session.status is not SessionStatus.COMPLETED:
            return False
        return self.options.skip_duplicates or not self.duplicates

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation."""
        return _jsonable(
            {
                "session": asdict(self.session),
                "imported": [asdict(t) for t in self.imported],
                "duplicates": [asdict(d) for d in self.duplicates],
                "errors": [asdict(e) for e in self.errors],
            }
        )


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_jsonable(item) for item in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value
