"""Full reset command."""

import click
from finledger.domain.csv_import import ImportService


@click.command("reset")
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def reset(ctx, yes: bool):
    """Delete every transaction and import batch.

    Account balances are reversed by exactly what was removed, so each
    account ends at its opening balance. Accounts, categories and rules stay.
    """
    if not yes and not click.confirm("Delete ALL transactions?"):
        click.echo("Cancelled.")
        return

    deleted = ImportService(ctx.obj["db"]).delete_all_transactions()
    click.echo(f"Deleted {deleted} transactions.")


def register_commands(cli):
    """Register reset command with main CLI."""
    cli.add_command(reset)
