"""Per-row validation with row-level error collection."""

import logging
from dataclasses import dataclass, field
from typing import Sequence

from spendtrack.domain.entities import ImportRowError, NormalizedTransaction, RawRow
from spendtrack.domain.errors import MissingColumnsError, RowParseError
from spendtrack.domain.headers import missing_required_columns
from spendtrack.domain.row_parser import parse_row

logger = logging.getLogger(__name__)

# The header is line 1 of the file
FIRST_DATA_ROW = 2


@dataclass
class ValidationOutcome:
    """Candidates and row errors for one file."""

    candidates: list[tuple[int, NormalizedTransaction]] = field(default_factory=list)
    errors: list[ImportRowError] = field(default_factory=list)
    total_rows: int = 0


def to_raw_row(headers: Sequence[str], cells: Sequence[str]) -> RawRow:
    """Zip normalized headers with one record's cells.

    Extra cells are ignored and missing cells are blank. When two columns
    normalize to the same name the leftmost one is kept.
    """
    row: RawRow = {}
    for index, header in enumerate(headers):
        if header in row:
            continue
        value = cells[index] if index < len(cells) else ""
        row[header] = (value or "").strip()
    return row


def validate_rows(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> ValidationOutcome:
    """Parse every data record, collecting failures instead of stopping.

    Args:
        headers: Normalized header names
        rows: Raw data records, in file order

    Raises:
        MissingColumnsError: If a required column is absent from the header
    """
    missing = missing_required_columns(headers)
    if missing:
        raise MissingColumnsError(missing)

    outcome = ValidationOutcome()
    for row_number, cells in enumerate(rows, start=FIRST_DATA_ROW):
        raw_row = to_raw_row(headers, cells)
        try:
            candidate = parse_row(raw_row)
        except RowParseError as e:
            outcome.total_rows += 1
            logger.debug("Row %d rejected (%s): %s", row_number, e.field, e)
            outcome.errors.append(
                ImportRowError(row=row_number, message=str(e), data=raw_row, field=e.field)
            )
            continue

        if candidate is None:
            continue
        outcome.total_rows += 1
        outcome.candidates.append((row_number, candidate))

    return outcome
