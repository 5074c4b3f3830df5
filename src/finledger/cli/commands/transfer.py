"""Transfer detection commands."""

import click
from finledger.cli.error_handling import handle_domain_error
from finledger.domain.account import AccountService
from finledger.domain.entities import TransferConfidence
from finledger.domain.transfers import TransferService
from finledger.utils.amount_parser import format_cents


@click.group()
def transfer_group():
    """Find and confirm transfers between your own accounts."""
    pass


@transfer_group.command("scan")
@click.option("--mark-high", is_flag=True, help="Mark every high-confidence pair as a transfer")
@click.pass_context
def scan_transfers(ctx, mark_high: bool):
    """List probable transfer pairs."""
    db = ctx.obj["db"]
    service = TransferService(db)
    names = {a.id: a.name for a in AccountService(db).list_accounts(include_inactive=True)}

    pairs = service.find_probable_transfers()
    if not pairs:
        click.echo("No probable transfers found.")
        return

    marked = 0
    for pair in pairs:
        out, inc = pair.outgoing, pair.incoming
        click.echo(
            f"[{pair.confidence.value:6s}] {out.id:5d} -> {inc.id:5d} | "
            f"{format_cents(-out.amount_cents, out.currency):>14s} | "
            f"{names.get(out.account_id)} ({out.date}) -> {names.get(inc.account_id)} ({inc.date})"
        )
        if mark_high and pair.confidence == TransferConfidence.HIGH:
            service.mark_as_transfer(out.id, inc.id)
            marked += 1
    if mark_high:
        click.echo(f"Marked {marked} transfers.")


@transfer_group.command("mark")
@click.argument("outgoing_id", type=int)
@click.argument("incoming_id", type=int)
@click.pass_context
def mark_transfer(ctx, outgoing_id: int, incoming_id: int):
    """Mark two transactions as one transfer."""
    try:
        TransferService(ctx.obj["db"]).mark_as_transfer(outgoing_id, incoming_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Marked {outgoing_id} and {incoming_id} as a transfer")


@transfer_group.command("unmark")
@click.argument("transaction_id", type=int)
@click.pass_context
def unmark_transfer(ctx, transaction_id: int):
    """Clear the transfer flag on a transaction and its partner."""
    try:
        TransferService(ctx.obj["db"]).unmark_transfer(transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Unmarked transfer on {transaction_id}")


@transfer_group.command("stats")
@click.pass_context
def transfer_stats(ctx):
    """Count marked transfers and pending probable pairs."""
    stats = TransferService(ctx.obj["db"]).get_transfer_stats()
    click.echo(f"Marked transfer transactions: {stats.marked_transfers}")
    click.echo(f"Probable transfer pairs:      {stats.probable_transfers}")


def register_commands(cli):
    """Register transfer commands with main CLI."""
    cli.add_command(transfer_group, name="transfer")
