"""Reading uploaded CSV and Excel files into header and row lists."""

import csv
import io
import logging
import zipfile
from datetime import date, datetime
from pathlib import PurePath
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from spendtrack.domain.errors import (
    EmptyFileError,
    FileTooLargeError,
    FormatError,
    UnsupportedFileTypeError,
)

logger = logging.getLogger(__name__)

MAX_IMPORT_BYTES = 10 * 1024 * 1024
SUPPORTED_EXTENSIONS = (".csv", ".xlsx")
PREFERRED_SHEET = "Transactions"

Table = tuple[list[str], list[list[str]]]


def file_extension(filename: str) -> str:
    return PurePath(filename).suffix.lower()


def check_file(content: bytes, filename: str, max_bytes: int = MAX_IMPORT_BYTES) -> None:
    """Reject a file before any parsing.

    Raises:
        UnsupportedFileTypeError: If the extension is not .csv or .xlsx
        FileTooLargeError: If the content exceeds max_bytes
        EmptyFileError: If there is no content at all
    """
    if file_extension(filename) not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFileTypeError(
            f"Unsupported file type '{filename}'. Please upload a CSV or Excel (.xlsx) file"
        )
    if len(content) > max_bytes:
        raise FileTooLargeError(len(content), max_bytes)
    if not content:
        raise EmptyFileError(f"File '{filename}' is empty")


def read_table(content: bytes, filename: str) -> Table:
    """Read raw header cells and data rows from file content.

    Fully blank records are kept so row numbers stay aligned with the file.

    Raises:
        FormatError: If the content cannot be read as the declared type
    """
    if file_extension(filename) == ".xlsx":
        header, rows = _read_xlsx(content)
    else:
        header, rows = _read_csv(content)

    if not header or not any(cell.strip() for cell in header):
        raise EmptyFileError(f"File '{filename}' has no header row")
    logger.debug("Read %d data rows from %s", len(rows), filename)
    return header, rows


def _read_csv(content: bytes) -> Table:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise FormatError(f"CSV file is not valid UTF-8: {e}") from e

    # Try to detect delimiter
    sample = text[:1024]
    try:
        delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t|").delimiter
    except csv.Error:
        delimiter = ","

    try:
        records = list(csv.reader(io.StringIO(text, newline=""), delimiter=delimiter))
    except csv.Error as e:
        raise FormatError(f"Could not read CSV file: {e}") from e

    if not records:
        return [], []
    return records[0], records[1:]


def _read_xlsx(content: bytes) -> Table:
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError, ValueError) as e:
        raise FormatError(f"Could not read Excel file: {e}") from e

    try:
        if PREFERRED_SHEET in workbook.sheetnames:
            sheet = workbook[PREFERRED_SHEET]
        else:
            sheet = workbook.worksheets[0]
        records = [[_cell_to_str(value) for value in row] for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()

    if not records:
        return [], []
    return records[0], records[1:]


def _cell_to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        # Excel stores every number as a float
        return str(int(value))
    return str(value)
