"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as an invalid state change."""


class FormatError(ValidationError):
    """Input file rejected before any parsing took place."""


class UnsupportedFileTypeError(FormatError):
    """File extension is not one of the supported import formats."""


class FileTooLargeError(FormatError):
    """File exceeds the configured size ceiling."""

    def __init__(self, size: int, max_bytes: int):
        self.size = size
        self.max_bytes = max_bytes
        super().__init__(file_too_large(size, max_bytes))


class EmptyFileError(FormatError):
    """File has no content or no transaction data."""


class MissingColumnsError(ValidationError):
    """Header row lacks one or more required columns."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(missing_required_columns(self.missing))


class RowParseError(ValidationError):
    """A single row could not be converted into a transaction."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class InvalidSessionTransitionError(ConflictError):
    """Import session is already in a terminal state."""


class CommitFault(DomainError):
    """Store failure unrelated to uniqueness; the whole batch was rolled back."""


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def import_session_not_found(session_id: int) -> str:
    """Return message for missing import session."""
    return f"Import session {session_id} not found"


def session_already_terminal(session_id: int, status: str) -> str:
    """Return message when a finished session is transitioned again."""
    return f"Import session {session_id} is already {status}"


def file_too_large(size: int, max_bytes: int) -> str:
    """Return message for a file above the size ceiling."""
    return f"File size {size} bytes exceeds maximum allowed size of {max_bytes} bytes"


def missing_required_columns(missing: list[str]) -> str:
    """Return message for a header row without required columns."""
    return f"CSV file missing required columns: {', '.join(missing)}"
