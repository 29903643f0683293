"""Import and preview commands."""

import json
from pathlib import Path

import click
from spendtrack.cli.error_handling import handle_domain_error, handle_store_error
from spendtrack.database.base import StoreError
from spendtrack.domain.csv_import import ImportService
from spendtrack.domain.entities import ImportOptions, ImportResult, SessionStatus
from spendtrack.domain.errors import DomainError
from spendtrack.domain.file_reader import MAX_IMPORT_BYTES

MAX_SIZE_ENV_VAR = "SPENDTRACK_MAX_IMPORT_BYTES"


def _echo_result(result: ImportResult) -> None:
    session = result.session
    click.echo(f"\nImport session {session.id}: {session.status.value}")
    click.echo(f"  File: {session.filename}")
    click.echo(f"  Rows: {session.total_rows}")
    click.echo(f"  Imported: {session.imported_count} transactions")
    click.echo(f"  Duplicates: {session.duplicate_count}")
    click.echo(f"  Errors: {session.error_count}")

    if session.status is SessionStatus.FAILED:
        click.echo(f"Error: Import failed: {session.error_message}", err=True)

    if result.duplicates:
        click.echo("\nDuplicates:")
        for dup in result.duplicates:
            existing = f"transaction {dup.existing_id}" if dup.existing_id else "an earlier row"
            click.echo(
                f"  Row {dup.row}: {dup.date} ${dup.amount:,.2f} {dup.description} "
                f"(matches {existing})"
            )

    if result.errors:
        click.echo("\nRow errors:")
        for error in result.errors:
            field = f" [{error.field}]" if error.field else ""
            click.echo(f"  Row {error.row}{field}: {error.message}", err=True)


@click.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--no-skip-duplicates",
    is_flag=True,
    help="Treat duplicate transactions as a failure instead of skipping them",
)
@click.option("--validate-only", is_flag=True, help="Check the file without saving anything")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.option(
    "--max-size",
    type=click.IntRange(min=1),
    default=MAX_IMPORT_BYTES,
    envvar=MAX_SIZE_ENV_VAR,
    show_default=True,
    help="Maximum file size in bytes",
)
@click.pass_context
def import_file(
    ctx, file: str, no_skip_duplicates: bool, validate_only: bool, as_json: bool, max_size: int
):
    """Import transactions from a CSV or Excel (.xlsx) file.

    Rows that cannot be read are reported and skipped; transactions that
    already exist are reported as duplicates.

    Examples:
        spendtrack import statement.csv
        spendtrack import statement.xlsx --validate-only
    """
    db = ctx.obj["db"]
    service = ImportService(db, max_bytes=max_size)
    options = ImportOptions(
        skip_duplicates=not no_skip_duplicates,
        validate_only=validate_only,
    )

    try:
        result = service.import_path(file, options)
    except (DomainError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)
    except StoreError as e:
        handle_store_error(ctx, e)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _echo_result(result)
        if validate_only and result.session.status is SessionStatus.COMPLETED:
            click.echo("\nValidation only: no transactions were saved.")

    if not result.accepted:
        ctx.exit(1)


@click.command("preview")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--rows", "max_rows", type=click.IntRange(min=0), default=5, show_default=True,
              help="Number of sample rows to show")
@click.pass_context
def preview_file(ctx, file: str, max_rows: int):
    """Show how a file's columns and first rows will be read."""
    db = ctx.obj["db"]
    service = ImportService(db)
    path = Path(file)
    preview = service.preview(path.read_bytes(), path.name, max_rows=max_rows)

    if preview["headers"]:
        click.echo("\nColumns:")
        for raw, canonical in zip(preview["headers"], preview["canonical_headers"]):
            mapped = f" -> {canonical}" if canonical != raw else ""
            click.echo(f"  {raw}{mapped}")
        click.echo(f"\nData rows: {preview['row_count']}")

    for index, row in enumerate(preview["sample_rows"], start=1):
        click.echo(f"  {index}: {row}")

    for error in preview["errors"]:
        click.echo(f"Error: {error}", err=True)

    if not preview["is_valid"]:
        ctx.exit(1)
    click.echo("\nFile looks valid for import.")


def register_commands(cli):
    """Register import commands with main CLI."""
    cli.add_command(import_file)
    cli.add_command(preview_file)
