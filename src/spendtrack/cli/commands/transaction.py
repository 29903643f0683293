"""Transaction management commands."""

import click
from spendtrack.cli.error_handling import handle_domain_error
from spendtrack.domain.errors import DomainError
from spendtrack.domain.transaction import TransactionService
from spendtrack.utils.date_parser import parse_date


@click.group()
def transaction_group():
    """View and delete imported transactions."""
    pass


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today', 'this month')")
@click.option("--category", help="Exact category name")
@click.option("--limit", type=click.IntRange(min=1), help="Maximum number of transactions to show")
@click.pass_context
def list_transactions(ctx, start_date: str, end_date: str, category: str, limit: int | None):
    """View transactions with optional filters, newest first."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    # Parse dates
    start = None
    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    end = None
    if end_date:
        try:
            end = parse_date(end_date)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    try:
        transactions = service.list_transactions(
            start_date=start, end_date=end, category=category, limit=limit
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 100)
    click.echo(f"{'ID':<6} {'Date':<12} {'Amount':<14} {'Category':<24} {'Description':<40}")
    click.echo("-" * 100)

    for txn in transactions:
        amount_str = f"${txn.amount:,.2f}"
        category_name = (txn.category or "")[:24]
        description = txn.description[:40]
        click.echo(
            f"{txn.id:<6} {str(txn.date):<12} {amount_str:<14} {category_name:<24} {description:<40}"
        )

    # Show totals
    total_expenses = sum(txn.amount for txn in transactions if txn.amount < 0)
    total_income = sum(txn.amount for txn in transactions if txn.amount > 0)
    click.echo("-" * 100)
    click.echo(
        f"{'TOTAL':<6} {'':<12} Expenses: ${abs(total_expenses):,.2f} | "
        f"Income: ${total_income:,.2f} | Count: {len(transactions)}"
    )


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Delete without asking for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool) -> None:
    """Delete a transaction.

    Deleting an ID that doesn't exist is reported but is not an error.

    Examples:
        spendtrack transactions delete 1
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)

    txn = transaction_service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Transaction {transaction_id} not found, nothing deleted.")
        return

    # Confirm deletion
    if not yes and not click.confirm(
        f"Delete transaction {transaction_id} ({txn.date} ${txn.amount:,.2f} {txn.description})?"
    ):
        click.echo("Deletion cancelled.")
        return

    if transaction_service.delete_transaction(transaction_id):
        click.echo(f"Deleted transaction {transaction_id}")
    else:
        click.echo(f"Transaction {transaction_id} not found, nothing deleted.")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transactions")
