"""CSV import and import batch commands."""

import click
from finledger.cli.error_handling import handle_domain_error
from finledger.cli.parsing import resolve_account_or_exit
from finledger.domain.csv_import import CSVColumns, ImportService
from finledger.utils.amount_parser import format_cents


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--account", required=True, help="Account name or ID the file belongs to")
@click.option("--date-column", default="Date", show_default=True)
@click.option("--amount-column", default="Amount", show_default=True)
@click.option("--description-column", default="Description", show_default=True)
@click.option("--merchant-column", help="Column holding the merchant name")
@click.option("--id-column", help="Column holding a unique transaction ID")
@click.option("--currency-column", help="Column holding the currency code")
@click.option(
    "--month-first",
    is_flag=True,
    help="Read dates like 03/01/2024 as month/day/year (default is day/month/year)",
)
@click.option(
    "--preserve-balance",
    is_flag=True,
    help="Historical import: keep the current balance and adjust the opening balance instead",
)
@click.option("--no-categorize", is_flag=True, help="Don't apply category rules to new rows")
@click.pass_context
def import_csv(
    ctx,
    csv_file: str,
    account: str,
    date_column: str,
    amount_column: str,
    description_column: str,
    merchant_column: str | None,
    id_column: str | None,
    currency_column: str | None,
    month_first: bool,
    preserve_balance: bool,
    no_categorize: bool,
):
    """Import transactions from a CSV file.

    Rows already imported before (same transaction ID, or same content when
    the file has no ID column) are skipped.

    Examples:
        finledger import statement.csv --account "Main Checking"
        finledger import history.csv --account 1 --preserve-balance
    """
    service = ImportService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, account)
    columns = CSVColumns(
        date=date_column,
        amount=amount_column,
        description=description_column,
        merchant=merchant_column,
        external_id=id_column,
        currency=currency_column,
    )

    try:
        result, errors = service.import_csv(
            csv_file,
            account_id,
            columns=columns,
            day_first=not month_first,
            preserve_balance=preserve_balance,
            auto_categorize=not no_categorize,
        )
    except (ValueError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)

    click.echo("\nImport complete:")
    click.echo(f"  Imported: {result.imported} transactions")
    click.echo(f"  Skipped: {result.skipped} duplicates")
    if result.batch_id is not None:
        click.echo(f"  Batch: {result.batch_id}")
    if errors:
        click.echo(f"  Errors: {len(errors)}")
        for error in errors:
            click.echo(f"    {error}", err=True)


@click.group()
def batch_group():
    """Manage import batches."""
    pass


@batch_group.command("list")
@click.pass_context
def list_batches(ctx):
    """List import batches, newest first."""
    batches = ImportService(ctx.obj["db"]).list_batches()
    if not batches:
        click.echo("No import batches.")
        return

    for batch in batches:
        mode = " (balance preserved)" if batch.preserve_balance else ""
        click.echo(
            f"ID: {batch.id:3d} | {batch.imported_at:%Y-%m-%d %H:%M} | "
            f"{batch.filename or '-':25s} | {batch.transaction_count:5d} rows | "
            f"{format_cents(batch.total_amount_cents):>12s}{mode}"
        )


@batch_group.command("undo")
@click.argument("batch_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def undo_batch(ctx, batch_id: int, yes: bool):
    """Delete an import batch and its transactions, reversing their balance effect."""
    if not yes and not click.confirm(f"Delete import batch {batch_id} and all its transactions?"):
        click.echo("Cancelled.")
        return

    try:
        deleted = ImportService(ctx.obj["db"]).delete_import_batch(batch_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted {deleted} transactions from batch {batch_id}")


def register_commands(cli):
    """Register import commands with main CLI."""
    cli.add_command(import_csv)
    cli.add_command(batch_group, name="batch")
