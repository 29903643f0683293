"""Header normalization for imported files.

Bank exports spell the same column many ways ("Transaction Date",
"Posted Date", "Memo", ...). Headers are mapped onto a fixed canonical field
set here; anything unrecognized is kept as it was written.
"""

from typing import Iterable

HEADER_SYNONYMS: dict[str, tuple[str, ...]] = {
    "date": ("date", "transaction date", "posted date", "posting date", "trans date"),
    "amount": ("amount", "transaction amount"),
    "debit": ("debit", "debit amount", "withdrawal"),
    "credit": ("credit", "credit amount", "deposit"),
    "description": ("description", "transaction description", "memo", "details"),
    "category": ("category",),
    "merchant": ("merchant", "merchant name", "payee", "vendor"),
    "account": ("account", "account name"),
    "type": ("type", "transaction type"),
}

_SYNONYM_LOOKUP = {
    synonym: canonical
    for canonical, synonyms in HEADER_SYNONYMS.items()
    for synonym in synonyms
}

REQUIRED_COLUMNS = ("date", "description", "amount")
AMOUNT_COLUMNS = ("amount", "debit", "credit")


def strip_non_printable(value: str) -> str:
    """Remove control characters and the byte order mark."""
    return "".join(ch for ch in value if ch.isprintable())


def normalize_header(name: str) -> str:
    """Map one header cell onto its canonical name.

    Unrecognized headers are returned verbatim.
    """
    key = " ".join(strip_non_printable(name or "").lower().split())
    return _SYNONYM_LOOKUP.get(key, name)


def normalize_headers(names: Iterable[str]) -> list[str]:
    """Normalize a whole header row."""
    return [normalize_header(name) for name in names]


def missing_required_columns(headers: Iterable[str]) -> list[str]:
    """Return the required columns absent from normalized headers.

    The amount requirement is met by a single amount column or by a debit
    and/or credit column.
    """
    present = set(headers)
    missing = []
    for column in REQUIRED_COLUMNS:
        if column == "amount":
            if not present.intersection(AMOUNT_COLUMNS):
                missing.append(column)
        elif column not in present:
            missing.append(column)
    return missing
