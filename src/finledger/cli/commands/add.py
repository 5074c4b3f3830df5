"""Add transaction command."""

import click
from finledger.cli.error_handling import handle_domain_error
from finledger.cli.parsing import (
    parse_cents_or_exit,
    parse_date_or_exit,
    resolve_account_or_exit,
    resolve_category_or_exit,
)
from finledger.domain.transaction import TransactionService
from finledger.utils.amount_parser import format_cents


@click.command("add")
@click.option("--account", required=True, help="Account name or ID")
@click.option(
    "--date",
    "date_str",
    default="today",
    show_default=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--amount", required=True, help="Signed amount (e.g. -12.50 for an expense)")
@click.option("--description", required=True, help="Transaction description")
@click.option("--merchant", help="Merchant name")
@click.option("--category", help="Category name or ID (chosen by rules if omitted)")
@click.option("--notes", help="Notes")
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    date_str: str,
    amount: str,
    description: str,
    merchant: str | None,
    category: str | None,
    notes: str | None,
) -> None:
    """Add a transaction manually and update the account balance.

    Examples:
        finledger add --account "Main Checking" --amount -4.50 --description "Coffee"
        finledger add --account 1 --amount 2500 --description "Salary" --category Salary
    """
    service = TransactionService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, account)
    txn_date = parse_date_or_exit(ctx, date_str)
    amount_cents = parse_cents_or_exit(ctx, amount)
    category_id = resolve_category_or_exit(ctx, category) if category else None

    try:
        txn = service.create_transaction(
            account_id=account_id,
            date=txn_date,
            amount_cents=amount_cents,
            description=description,
            category_id=category_id,
            merchant=merchant,
            notes=notes,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Added transaction {txn.id}: {txn.date} {format_cents(txn.amount_cents, txn.currency)} {txn.description}")
    if category_id is None and txn.category_id is not None:
        click.echo(f"Categorized by rule as category {txn.category_id}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
