"""Mortgage calculator command."""

import click
from finledger.cli.error_handling import handle_domain_error
from finledger.cli.parsing import parse_cents_or_exit, parse_date_or_exit
from finledger.domain.mortgage import calculate_mortgage
from finledger.utils.amount_parser import format_cents


@click.command("mortgage")
@click.option("--principal", required=True, help="Amount borrowed (e.g. 250000)")
@click.option("--rate", type=float, required=True, help="Annual interest rate in percent (e.g. 3.5)")
@click.option("--years", type=int, default=30, show_default=True, help="Loan term in years")
@click.option("--start-date", default="today", show_default=True)
@click.option("--extra", default="0", help="Extra principal paid each month")
@click.option("--schedule", "show_schedule", is_flag=True, help="Print the full schedule")
@click.pass_context
def mortgage(ctx, principal: str, rate: float, years: int, start_date: str, extra: str, show_schedule: bool):
    """Calculate payments and an amortization schedule.

    Examples:
        finledger mortgage --principal 250000 --rate 3.5 --years 30
    """
    try:
        result = calculate_mortgage(
            principal_cents=parse_cents_or_exit(ctx, principal),
            annual_rate=rate / 100,
            term_months=years * 12,
            start_date=parse_date_or_exit(ctx, start_date),
            extra_payment_cents=parse_cents_or_exit(ctx, extra),
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Monthly payment: {format_cents(result.monthly_payment)}")
    click.echo(f"Total interest:  {format_cents(result.total_interest)}")
    click.echo(f"Total paid:      {format_cents(result.total_payment)}")
    click.echo(f"Payments:        {len(result.schedule)}")
    if show_schedule:
        click.echo("")
        for row in result.schedule:
            click.echo(
                f"{row.month:4d} | {row.date} | {format_cents(row.payment):>12s} | "
                f"principal {format_cents(row.principal):>12s} | interest {format_cents(row.interest):>10s} | "
                f"balance {format_cents(row.balance):>14s}"
            )


def register_commands(cli):
    """Register mortgage command with main CLI."""
    cli.add_command(mortgage)
