"""Import session commands."""

import click
from spendtrack.cli.error_handling import handle_domain_error
from spendtrack.domain.entities import ImportSession, SessionStatus
from spendtrack.domain.errors import DomainError
from spendtrack.domain.import_session import ImportSessionTracker


def _format_time(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else "-"


@click.group()
def session_group():
    """Inspect and maintain import sessions."""
    pass


@session_group.command("list")
@click.option(
    "--status",
    type=click.Choice([status.value for status in SessionStatus]),
    help="Only show sessions with this status",
)
@click.option("--limit", type=click.IntRange(min=1), default=20, show_default=True)
@click.pass_context
def list_sessions(ctx, status: str | None, limit: int):
    """List import sessions, most recent first."""
    tracker = ImportSessionTracker(ctx.obj["db"])
    sessions = tracker.list_sessions(
        status=SessionStatus(status) if status else None, limit=limit
    )

    if not sessions:
        click.echo("No import sessions found.")
        return

    click.echo(
        f"{'ID':<6} {'Started':<20} {'Status':<10} {'Rows':>6} {'Imported':>9} "
        f"{'Dups':>6} {'Errors':>7}  File"
    )
    click.echo("-" * 100)
    for s in sessions:
        click.echo(
            f"{s.id:<6} {_format_time(s.started_at):<20} {s.status.value:<10} {s.total_rows:>6} "
            f"{s.imported_count:>9} {s.duplicate_count:>6} {s.error_count:>7}  {s.filename}"
        )


def _echo_session(session: ImportSession) -> None:
    click.echo(f"Import session {session.id}")
    click.echo(f"  File: {session.filename}")
    click.echo(f"  Status: {session.status.value}")
    click.echo(f"  Started: {_format_time(session.started_at)}")
    click.echo(f"  Completed: {_format_time(session.completed_at)}")
    click.echo(f"  Rows: {session.total_rows}")
    click.echo(f"  Imported: {session.imported_count}")
    click.echo(f"  Duplicates: {session.duplicate_count}")
    click.echo(f"  Errors: {session.error_count}")
    if session.error_message:
        click.echo(f"  Error message: {session.error_message}")


@session_group.command("show")
@click.argument("session_id", type=int)
@click.pass_context
def show_session(ctx, session_id: int):
    """Show one import session with timing."""
    tracker = ImportSessionTracker(ctx.obj["db"])
    try:
        session = tracker.get(session_id)
        timing = tracker.timing(session_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    _echo_session(session)
    click.echo(f"  Duration: {timing['duration_seconds']:.3f}s")
    if timing["rows_per_second"] is not None:
        click.echo(f"  Rate: {timing['rows_per_second']} rows/s")


@session_group.command("stats")
@click.pass_context
def session_stats(ctx):
    """Show totals across all import sessions."""
    tracker = ImportSessionTracker(ctx.obj["db"])
    stats = tracker.stats()
    last = tracker.last_successful()

    click.echo(f"Sessions: {stats['total_sessions']}")
    click.echo(f"  Completed: {stats['completed_sessions']}")
    click.echo(f"  Failed: {stats['failed_sessions']}")
    click.echo(f"  Pending: {stats['pending_sessions']}")
    click.echo(f"Transactions imported: {stats['total_imported']}")
    click.echo(f"Duplicates skipped: {stats['total_duplicates']}")
    click.echo(f"Row errors: {stats['total_errors']}")
    click.echo(f"Success rate: {stats['success_rate']:.2f}%")
    if last is not None:
        click.echo(f"Last successful import: {last.filename} ({_format_time(last.completed_at)})")


@session_group.command("cancel")
@click.argument("session_id", type=int)
@click.pass_context
def cancel_session(ctx, session_id: int):
    """Mark a pending import session as failed."""
    tracker = ImportSessionTracker(ctx.obj["db"])
    try:
        tracker.cancel(session_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Cancelled import session {session_id}")


@session_group.command("cleanup")
@click.option("--days", type=click.IntRange(min=0), required=True,
              help="Delete sessions started more than this many days ago")
@click.option("--yes", "-y", is_flag=True, help="Delete without asking for confirmation")
@click.pass_context
def cleanup_sessions(ctx, days: int, yes: bool):
    """Delete old import session records.

    Transactions imported by those sessions are kept.
    """
    tracker = ImportSessionTracker(ctx.obj["db"])
    if not yes and not click.confirm(f"Delete import sessions older than {days} days?"):
        click.echo("Cleanup cancelled.")
        return
    deleted = tracker.delete_older_than(days)
    click.echo(f"Deleted {deleted} import session(s)")


def register_commands(cli: click.Group) -> None:
    """Register session commands with main CLI."""
    cli.add_command(session_group, name="sessions")
