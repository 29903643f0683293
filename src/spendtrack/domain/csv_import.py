"""CSV and Excel import domain service."""

import logging
from pathlib import Path
from typing import Any, Optional

from spendtrack.database.base import Database, StoreError
from spendtrack.domain.batch_commit import BatchCommitter, CommitOutcome
from spendtrack.domain.entities import ImportOptions, ImportResult
from spendtrack.domain.errors import CommitFault, DomainError, EmptyFileError
from spendtrack.domain.file_reader import MAX_IMPORT_BYTES, check_file, read_table
from spendtrack.domain.headers import missing_required_columns, normalize_headers
from spendtrack.domain.import_session import ImportSessionTracker
from spendtrack.domain.row_parser import is_empty_row
from spendtrack.domain.row_validator import to_raw_row, validate_rows

logger = logging.getLogger(__name__)


class ImportService:
    """Service for importing transaction files."""

    def __init__(self, db: Database, max_bytes: int = MAX_IMPORT_BYTES):
        """Initialize import service.

        Args:
            db: Database instance
            max_bytes: Size ceiling for imported files
        """
        self.db = db
        self.max_bytes = max_bytes
        self.committer = BatchCommitter(db)
        self.tracker = ImportSessionTracker(db)

    def import_file(
        self,
        content: bytes,
        filename: str,
        options: Optional[ImportOptions] = None,
    ) -> ImportResult:
        """Import transactions from file content.

        Row problems are reported in the result's errors and never stop the
        import. A store failure while committing marks the session failed
        and is reported through the returned session rather than raised.

        Args:
            content: Raw file bytes
            filename: Original file name, used for type detection and provenance
            options: Duplicate handling and dry-run switches

        Returns:
            ImportResult with session, imported transactions, duplicates and errors

        Raises:
            FormatError: If the file is rejected before parsing
            MissingColumnsError: If the header lacks required columns
        """
        options = options or ImportOptions()

        check_file(content, filename, self.max_bytes)
        raw_headers, rows = read_table(content, filename)
        headers = normalize_headers(raw_headers)
        validation = validate_rows(headers, rows)
        if validation.total_rows == 0:
            raise EmptyFileError(f"File '{filename}' contains no transactions")

        session = self.tracker.start(filename, validation.total_rows)
        error_count = len(validation.errors)

        try:
            outcome = self.committer.commit(validation.candidates, dry_run=options.validate_only)
        except (CommitFault, StoreError) as e:
            failed = self.tracker.fail(session.id, str(e), error_count=error_count)
            return ImportResult(session=failed, errors=validation.errors, options=options)
        except Exception as e:
            self.tracker.fail(session.id, f"Unexpected error: {e}", error_count=error_count)
            raise

        self._log_duplicates(session.id, outcome, options)
        imported = [] if options.validate_only else outcome.imported
        finished = self.tracker.complete(
            session.id,
            imported_count=len(imported),
            duplicate_count=len(outcome.duplicates),
            error_count=error_count,
        )
        return ImportResult(
            session=finished,
            imported=imported,
            duplicates=outcome.duplicates,
            errors=validation.errors,
            options=options,
        )

    def import_path(self, path: str, options: Optional[ImportOptions] = None) -> ImportResult:
        """Import a file from disk.

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        return self.import_file(file_path.read_bytes(), file_path.name, options)

    def preview(self, content: bytes, filename: str, max_rows: int = 5) -> dict[str, Any]:
        """Show what an import would see without touching the store.

        Format problems are reported under ``errors`` instead of raised.

        Returns:
            Dict with headers, canonical_headers, sample_rows, row_count,
            missing_columns, is_valid and errors
        """
        preview: dict[str, Any] = {
            "headers": [],
            "canonical_headers": [],
            "sample_rows": [],
            "row_count": 0,
            "missing_columns": [],
            "is_valid": False,
            "errors": [],
        }
        try:
            check_file(content, filename, self.max_bytes)
            raw_headers, rows = read_table(content, filename)
        except DomainError as e:
            preview["errors"].append(str(e))
            return preview

        headers = normalize_headers(raw_headers)
        raw_rows = [to_raw_row(headers, cells) for cells in rows]
        data_rows = [row for row in raw_rows if not is_empty_row(row)]
        missing = missing_required_columns(headers)
        preview.update(
            headers=list(raw_headers),
            canonical_headers=headers,
            sample_rows=data_rows[:max_rows],
            row_count=len(data_rows),
            missing_columns=missing,
            is_valid=not missing and bool(data_rows),
        )
        if missing:
            preview["errors"].append(f"Missing required columns: {', '.join(missing)}")
        elif not data_rows:
            preview["errors"].append("File contains no data rows")
        return preview

    def _log_duplicates(self, session_id: int, outcome: CommitOutcome, options: ImportOptions) -> None:
        if not outcome.duplicates:
            return
        if options.skip_duplicates:
            logger.info(
                "Import session %d skipped %d duplicates", session_id, len(outcome.duplicates)
            )
            return
        for duplicate in outcome.duplicates:
            logger.warning(
                "Import session %d: row %d duplicates transaction %s",
                session_id,
                duplicate.row,
                duplicate.existing_id,
            )
