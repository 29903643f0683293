"""Utility functions for spendtrack."""

from spendtrack.utils.date_parser import parse_date, parse_flexible_date
from spendtrack.utils.amount_parser import parse_amount, parse_debit_credit

__all__ = ["parse_date", "parse_flexible_date", "parse_amount", "parse_debit_credit"]
