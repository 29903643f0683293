"""Conversion of one raw row into a normalized candidate transaction."""

from decimal import Decimal
from typing import Optional

from spendtrack.domain.entities import NormalizedTransaction, RawRow
from spendtrack.domain.errors import RowParseError
from spendtrack.utils.amount_parser import parse_amount, parse_debit_credit, quantize_amount
from spendtrack.utils.date_parser import parse_flexible_date

MAX_ABS_AMOUNT = Decimal("999999.99")
HALF_CENT = Decimal("0.005")
MAX_DESCRIPTION_LENGTH = 500
MAX_CATEGORY_LENGTH = 100

DEBIT_TYPES = {"debit", "dr", "withdrawal"}
CREDIT_TYPES = {"credit", "cr", "deposit"}


def _cell(row: RawRow, column: str) -> str:
    value = row.get(column)
    return value.strip() if value else ""


def is_empty_row(row: RawRow) -> bool:
    """A row without date, amount, debit or credit carries no transaction."""
    return not any(_cell(row, column) for column in ("date", "amount", "debit", "credit"))


def parse_row(row: RawRow) -> Optional[NormalizedTransaction]:
    """Parse a raw row keyed by canonical header names.

    Returns:
        The candidate transaction, or None when the row is empty and should
        be skipped

    Raises:
        RowParseError: With the failing field set
    """
    if is_empty_row(row):
        return None

    try:
        txn_date = parse_flexible_date(_cell(row, "date"))
    except ValueError as e:
        raise RowParseError(str(e), field="date") from e

    amount = _resolve_amount(row)

    description = _cell(row, "description")
    if not description:
        raise RowParseError("Description is required", field="description")
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise RowParseError(
            f"Description exceeds {MAX_DESCRIPTION_LENGTH} characters", field="description"
        )

    category = _cell(row, "category") or None
    if category is not None and len(category) > MAX_CATEGORY_LENGTH:
        raise RowParseError(
            f"Category exceeds {MAX_CATEGORY_LENGTH} characters", field="category"
        )

    return NormalizedTransaction(
        date=txn_date,
        amount=amount,
        description=description,
        category=category,
    )


def _resolve_amount(row: RawRow) -> Decimal:
    amount_str = _cell(row, "amount")
    try:
        if amount_str:
            amount = _apply_type(parse_amount(amount_str), _cell(row, "type"))
        elif "debit" in row or "credit" in row:
            amount = parse_debit_credit(_cell(row, "debit"), _cell(row, "credit"))
        else:
            raise ValueError("Amount is required")
    except ValueError as e:
        raise RowParseError(str(e), field="amount") from e

    # bound before rounding; quantize overflows on huge magnitudes
    if abs(amount) > MAX_ABS_AMOUNT + HALF_CENT:
        raise RowParseError(f"Amount exceeds maximum of {MAX_ABS_AMOUNT}", field="amount")
    amount = quantize_amount(amount)
    if amount == 0:
        # no negative zero
        amount = abs(amount)
    if abs(amount) > MAX_ABS_AMOUNT:
        raise RowParseError(f"Amount exceeds maximum of {MAX_ABS_AMOUNT}", field="amount")
    return amount


def _apply_type(amount: Decimal, txn_type: str) -> Decimal:
    """Force the sign of a single-column amount from a debit/credit type cell."""
    kind = txn_type.lower()
    if kind in DEBIT_TYPES:
        return -abs(amount)
    if kind in CREDIT_TYPES:
        return abs(amount)
    return amount
