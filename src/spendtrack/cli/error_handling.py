"""CLI error handling helpers."""

import click

from spendtrack.database.base import StoreError
from spendtrack.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError | OSError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def handle_store_error(ctx: click.Context, error: StoreError) -> None:
    """Render a database failure and exit with failure."""
    click.echo(f"Error: Database operation failed: {error}", err=True)
    ctx.exit(1)
