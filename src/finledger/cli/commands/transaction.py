"""Transaction management commands."""

import io

import click
from finledger.cli.error_handling import handle_domain_error
from finledger.cli.parsing import (
    parse_cents_or_exit,
    parse_date_or_exit,
    resolve_account_or_exit,
    resolve_category_or_exit,
)
from finledger.domain.category import CategoryService
from finledger.domain.transaction import TransactionService
from finledger.utils.amount_parser import format_cents


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


def _filters(ctx, start_date, end_date, account, category, uncategorized, no_transfers) -> dict:
    filters = {
        "start_date": parse_date_or_exit(ctx, start_date) if start_date else None,
        "end_date": parse_date_or_exit(ctx, end_date) if end_date else None,
        "account_id": resolve_account_or_exit(ctx, account) if account else None,
        "uncategorized": uncategorized,
        "include_transfers": not no_transfers,
    }
    if category and not uncategorized:
        filters["category_id"] = resolve_category_or_exit(ctx, category)
    return filters


def filter_options(func):
    """Shared filter options for list and export."""
    options = [
        click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')"),
        click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')"),
        click.option("--account", help="Account name or ID"),
        click.option("--category", help="Category name or ID"),
        click.option("--uncategorized", is_flag=True, help="Only transactions without a category"),
        click.option("--no-transfers", is_flag=True, help="Leave out transfers"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@transaction_group.command("list")
@filter_options
@click.option("--limit", type=int, default=50, show_default=True, help="Maximum rows to show")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    account: str | None,
    category: str | None,
    uncategorized: bool,
    no_transfers: bool,
    limit: int,
) -> None:
    """List transactions, newest first.

    Examples:
        finledger transaction list --start-date "this month"
        finledger transaction list --account "Main Checking" --uncategorized
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    filters = _filters(ctx, start_date, end_date, account, category, uncategorized, no_transfers)
    categories = {c.id: c.name for c in CategoryService(db).list_categories()}

    transactions = service.list_transactions(**filters)
    if not transactions:
        click.echo("No transactions found.")
        return

    for txn in transactions[:limit]:
        marker = " [transfer]" if txn.is_transfer else ""
        click.echo(
            f"{txn.id:5d} | {txn.date} | {format_cents(txn.amount_cents):>12s} {txn.currency} | "
            f"{txn.description[:40]:40s} | {categories.get(txn.category_id, '-')}{marker}"
        )
    if len(transactions) > limit:
        click.echo(f"... {len(transactions) - limit} more")


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--account", help="Account name or ID")
@click.option("--date", "date_str", help="Transaction date")
@click.option("--amount", help="Signed amount (e.g. -12.50)")
@click.option("--description", help="Transaction description")
@click.option("--merchant", help="Merchant name")
@click.option("--notes", help="Notes")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    account: str | None,
    date_str: str | None,
    amount: str | None,
    description: str | None,
    merchant: str | None,
    notes: str | None,
) -> None:
    """Update a transaction. Only the given fields change.

    Changing the amount or account moves the balance effect along with it.
    """
    service = TransactionService(ctx.obj["db"])

    changes = {}
    if account is not None:
        changes["account_id"] = resolve_account_or_exit(ctx, account)
    if date_str is not None:
        changes["date"] = parse_date_or_exit(ctx, date_str)
    if amount is not None:
        changes["amount_cents"] = parse_cents_or_exit(ctx, amount)
    if description is not None:
        changes["description"] = description
    if merchant is not None:
        changes["merchant"] = merchant
    if notes is not None:
        changes["notes"] = notes
    if not changes:
        click.echo("Nothing to update.")
        return

    try:
        service.update_transaction(transaction_id, **changes)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("categorize")
@click.argument("transaction_id", type=int)
@click.argument("category", required=False)
@click.pass_context
def categorize_transaction(ctx, transaction_id: int, category: str | None) -> None:
    """Set the category of a transaction; omit CATEGORY to clear it."""
    service = TransactionService(ctx.obj["db"])
    category_id = resolve_category_or_exit(ctx, category) if category else None

    try:
        service.set_category(transaction_id, category_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    if category_id is None:
        click.echo(f"Cleared category of transaction {transaction_id}")
    else:
        click.echo(f"Set category of transaction {transaction_id} to {category_id}")


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool) -> None:
    """Delete a transaction and reverse its balance effect."""
    service = TransactionService(ctx.obj["db"])
    txn = service.get_transaction(transaction_id)
    if txn is None:
        handle_domain_error(ctx, ValueError(f"Transaction {transaction_id} not found"))

    if not yes and not click.confirm(
        f"Delete transaction {txn.id} ({txn.date} {format_cents(txn.amount_cents)} {txn.description})?"
    ):
        click.echo("Deletion cancelled.")
        return

    service.delete_transaction(transaction_id)
    click.echo(f"Deleted transaction {transaction_id}")


@transaction_group.command("export")
@filter_options
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Output file (default stdout)")
@click.pass_context
def export_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    account: str | None,
    category: str | None,
    uncategorized: bool,
    no_transfers: bool,
    output: str | None,
) -> None:
    """Export transactions as CSV."""
    service = TransactionService(ctx.obj["db"])
    filters = _filters(ctx, start_date, end_date, account, category, uncategorized, no_transfers)

    if output is None:
        buffer = io.StringIO()
        service.export_csv(buffer, **filters)
        click.echo(buffer.getvalue(), nl=False)
        return

    with open(output, "w", encoding="utf-8", newline="") as f:
        count = service.export_csv(f, **filters)
    click.echo(f"Exported {count} transactions to {output}")


@transaction_group.command("uncategorized")
@click.pass_context
def count_uncategorized(ctx) -> None:
    """Show how many transactions have no category."""
    service = TransactionService(ctx.obj["db"])
    click.echo(f"{service.count_uncategorized()} uncategorized transactions")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
