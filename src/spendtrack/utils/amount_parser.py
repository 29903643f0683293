"""Amount parsing utilities."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
import re

CENTS = Decimal("0.01")

_CURRENCY_AND_SEPARATORS = re.compile(r"[$€£¥₹,\s]")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "-123.45"
    - "-$123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    cleaned = _CURRENCY_AND_SEPARATORS.sub("", amount_str)

    # Handle parentheses notation (negative)
    is_negative = False
    if cleaned.startswith("(") and cleaned.endswith(")"):
        is_negative = True
        cleaned = cleaned[1:-1]

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str.strip()}'")

    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str.strip()}'")

    if is_negative:
        amount = -abs(amount)
    return amount


def parse_debit_credit(debit_str: str, credit_str: str) -> Decimal:
    """Resolve an amount from separate debit and credit cells.

    Debits become negative and credits positive. Blank cells count as zero,
    and when both cells hold a non-zero value the two are summed.

    Raises:
        ValueError: If either cell is not numeric or the result is zero
    """
    debit = parse_amount(debit_str) if debit_str and debit_str.strip() else Decimal("0")
    credit = parse_amount(credit_str) if credit_str and credit_str.strip() else Decimal("0")

    signed_debit = -debit if debit > 0 else debit
    amount = signed_debit + credit
    if amount == 0:
        raise ValueError("Missing both debit and credit values")
    return amount


def quantize_amount(amount: Decimal) -> Decimal:
    """Round an amount to cents, half up."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
