"""Date parsing utilities."""

import re
from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

MONTH_ABBREVIATIONS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_DASHED_SHORT_DATE = re.compile(r"^(\d{1,2})-([A-Za-z]{3})-(\d{2})$")
_SPACED_SHORT_DATE = re.compile(r"^(\d{1,2})\s+([A-Za-z]{3})\s+(\d{2})$")
_US_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")


def _short_month_date(match: re.Match) -> date:
    day, month_str, year = match.groups()
    month = MONTH_ABBREVIATIONS.get(month_str.lower())
    if month is None:
        raise ValueError(f"Unknown month abbreviation '{month_str}'")
    return date(2000 + int(year), month, int(day))


def parse_flexible_date(date_str: str) -> date:
    """Parse a date cell from an imported statement.

    Forms are tried in order and the first whose pattern matches decides:
    - ISO "2025-01-15"
    - "14-Sep-25" / "2-Sep-25" (two-digit year means 20YY)
    - "12 Sep 25"
    - "01/15/2025" (month first)
    - anything python-dateutil understands, for strings no form above matches

    Raises:
        ValueError: If no form parses, or a matched form names an impossible date
    """
    if not date_str or not date_str.strip():
        raise ValueError("Date is required")

    cleaned = "".join(ch for ch in date_str if ch.isprintable()).strip()

    forms = (
        (_ISO_DATE, lambda m: date(int(m.group(1)), int(m.group(2)), int(m.group(3)))),
        (_DASHED_SHORT_DATE, _short_month_date),
        (_SPACED_SHORT_DATE, _short_month_date),
        (_US_DATE, lambda m: date(int(m.group(3)), int(m.group(1)), int(m.group(2)))),
    )
    for pattern, build in forms:
        match = pattern.match(cleaned)
        if match is None:
            continue
        try:
            return build(match)
        except ValueError as e:
            raise ValueError(f"Could not parse date '{date_str.strip()}': {e}") from e

    try:
        return date_parser.parse(cleaned).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str.strip()}': {e}")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "last month", "this year", etc.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)
        elif period == "week":
            # Monday of last week
            return today - timedelta(days=today.weekday() + 7)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)
        elif period == "week":
            return today - timedelta(days=today.weekday())

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
