"""Import session lifecycle and provenance queries."""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any, Optional

from spendtrack.database.base import Database
from spendtrack.domain.entities import ImportSession, SessionStatus
from spendtrack.domain.errors import (
    InvalidSessionTransitionError,
    NotFoundError,
    ValidationError,
    import_session_not_found,
    session_already_terminal,
)

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Import cancelled by user"


def _now_like(reference: Optional[datetime]) -> datetime:
    """Current UTC time, naive if the reference timestamp is naive."""
    now = datetime.now(UTC)
    if reference is not None and reference.tzinfo is None:
        return now.replace(tzinfo=None)
    return now


class ImportSessionTracker:
    """State machine for import sessions: pending -> completed | failed.

    Sessions are keyed by id and their state lives in the store, so
    concurrent imports never share in-memory counters.
    """

    def __init__(self, db: Database):
        """Initialize session tracker.

        Args:
            db: Database instance
        """
        self.db = db

    def start(self, filename: str, total_rows: int) -> ImportSession:
        """Open a pending session for one import call."""
        if total_rows < 0:
            raise ValidationError("total_rows must not be negative")
        session = self.db.create_import_session(filename=filename, total_rows=total_rows)
        logger.info("Started import session %d for %s (%d rows)", session.id, filename, total_rows)
        return session

    def complete(
        self,
        session_id: int,
        imported_count: int,
        duplicate_count: int,
        error_count: int,
    ) -> ImportSession:
        """Mark a pending session completed with its final counters.

        Raises:
            ValidationError: If the counters break the session invariant
            NotFoundError: If the session doesn't exist
            InvalidSessionTransitionError: If the session is already terminal
        """
        session = self.get(session_id)
        counts = (imported_count, duplicate_count, error_count)
        if any(count < 0 for count in counts):
            raise ValidationError("Session counters must not be negative")
        if sum(counts) > session.total_rows:
            raise ValidationError(
                f"Counters ({sum(counts)}) exceed total rows ({session.total_rows}) "
                f"for import session {session_id}"
            )

        self._transition(
            session,
            SessionStatus.COMPLETED,
            imported_count=imported_count,
            duplicate_count=duplicate_count,
            error_count=error_count,
        )
        finished = self.get(session_id)
        logger.info(
            "Import session %d completed: %d imported, %d duplicates, %d errors",
            session_id,
            imported_count,
            duplicate_count,
            error_count,
        )
        return finished

    def fail(
        self,
        session_id: int,
        error_message: str,
        error_count: Optional[int] = None,
    ) -> ImportSession:
        """Mark a pending session failed.

        Nothing is imported by a failed call, so imported and duplicate
        counters are reset to zero.

        Raises:
            NotFoundError: If the session doesn't exist
            InvalidSessionTransitionError: If the session is already terminal
        """
        session = self.get(session_id)
        if error_count is not None and not 0 <= error_count <= session.total_rows:
            raise ValidationError(
                f"Error count {error_count} outside 0..{session.total_rows} "
                f"for import session {session_id}"
            )
        self._transition(
            session,
            SessionStatus.FAILED,
            imported_count=0,
            duplicate_count=0,
            error_count=error_count,
            error_message=error_message,
        )
        logger.warning("Import session %d failed: %s", session_id, error_message)
        return self.get(session_id)

    def cancel(self, session_id: int) -> ImportSession:
        """Fail a session that is still pending."""
        return self.fail(session_id, CANCELLED_MESSAGE)

    def _transition(self, session: ImportSession, status: SessionStatus, **values: Any) -> None:
        if session.is_terminal:
            raise InvalidSessionTransitionError(
                session_already_terminal(session.id, session.status.value)
            )
        changed = self.db.finish_import_session(
            session.id,
            status,
            completed_at=_now_like(session.started_at),
            **values,
        )
        if changed == 0:
            # Another caller finished the session after we read it
            current = self.get(session.id)
            raise InvalidSessionTransitionError(
                session_already_terminal(current.id, current.status.value)
            )

    def get(self, session_id: int) -> ImportSession:
        """Get a session by id.

        Raises:
            NotFoundError: If the session doesn't exist
        """
        session = self.db.get_import_session(session_id)
        if session is None:
            raise NotFoundError(import_session_not_found(session_id))
        return session

    def list_recent(self, limit: int = 10) -> list[ImportSession]:
        """Most recently started sessions."""
        return self.db.list_import_sessions(limit=limit)

    def list_sessions(
        self,
        status: Optional[SessionStatus] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[ImportSession]:
        return self.db.list_import_sessions(status=status, limit=limit, offset=offset)

    def find_by_filename(self, filename: str) -> list[ImportSession]:
        return self.db.list_import_sessions(filename=filename)

    def last_successful(self) -> Optional[ImportSession]:
        """Most recent completed session that imported at least one row."""
        return self.db.get_last_successful_import()

    def has_pending(self) -> bool:
        return self.db.count_import_sessions(status=SessionStatus.PENDING) > 0

    def delete(self, session_id: int) -> bool:
        """Delete a session record. Returns False if it didn't exist."""
        return self.db.delete_import_session(session_id) > 0

    def delete_older_than(self, days: int) -> int:
        """Retention sweep: delete sessions started more than ``days`` ago.

        Returns:
            Number of sessions deleted
        """
        if days < 0:
            raise ValidationError("days must not be negative")
        # Stored timestamps are naive UTC on SQLite
        cutoff = datetime.now(UTC).replace(tzinfo=None) - timedelta(days=days)
        deleted = self.db.delete_import_sessions_before(cutoff)
        logger.info("Deleted %d import sessions older than %d days", deleted, days)
        return deleted

    def stats(self) -> dict[str, Any]:
        """Totals per status, summed counters and success rate.

        The success rate is the percentage of terminal sessions that
        completed, rounded to 2 places (0.0 when none are terminal).
        """
        totals = self.db.get_import_session_totals()
        terminal = totals["completed_sessions"] + totals["failed_sessions"]
        success_rate = 0.0
        if terminal:
            success_rate = round(totals["completed_sessions"] / terminal * 100, 2)
        return {**totals, "success_rate": success_rate}

    def timing(self, session_id: int) -> dict[str, Any]:
        """Duration and processing rate of a session.

        For a pending session the duration runs up to now.
        """
        session = self.get(session_id)
        finished_at = session.completed_at or _now_like(session.started_at)
        duration = max((finished_at - session.started_at).total_seconds(), 0.0)
        rate = round(session.total_rows / duration, 2) if duration > 0 else None
        return {
            "session_id": session.id,
            "status": session.status.value,
            "duration_seconds": round(duration, 3),
            "rows_per_second": rate,
        }
