"""Dashboard summary commands."""

import click
from finledger.cli.error_handling import handle_domain_error
from finledger.cli.parsing import parse_date_or_exit
from finledger.domain.summary import SummaryService
from finledger.utils.amount_parser import format_cents
from finledger.utils.date_parser import month_range


@click.group()
def summary_group():
    """Show summaries of your finances."""
    pass


@summary_group.command("dashboard")
@click.option("--month", help="Month as YYYY-MM (default: this month)")
@click.pass_context
def dashboard(ctx, month: str | None):
    """Net worth, monthly income, expenses and savings rate."""
    service = SummaryService(ctx.obj["db"])
    try:
        stats = service.get_dashboard_stats(month)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Net worth:    {format_cents(stats.net_worth):>14s}")
    click.echo(f"  Assets:     {format_cents(stats.total_assets):>14s}")
    click.echo(f"  Debts:      {format_cents(stats.total_liabilities):>14s}")
    click.echo(f"Income:       {format_cents(stats.monthly_income):>14s}")
    click.echo(f"Expenses:     {format_cents(stats.monthly_expenses):>14s}")
    click.echo(f"Savings rate: {stats.savings_rate:>13.1f}%")
    if stats.accounts:
        click.echo("\nAccounts:")
        for acc in stats.accounts:
            click.echo(f"  {acc.name:24s} {format_cents(acc.current_balance, acc.currency):>18s}")


@summary_group.command("categories")
@click.option("--month", help="Month as YYYY-MM (default: this month)")
@click.option("--start-date", help="Start date (overrides --month)")
@click.option("--end-date", help="End date (overrides --month)")
@click.pass_context
def categories(ctx, month: str | None, start_date: str | None, end_date: str | None):
    """Spending per category, largest first. Transfers are left out."""
    service = SummaryService(ctx.obj["db"])
    if start_date or end_date:
        start = parse_date_or_exit(ctx, start_date) if start_date else None
        end = parse_date_or_exit(ctx, end_date) if end_date else None
    else:
        try:
            start, end = month_range(month)
        except ValueError as e:
            handle_domain_error(ctx, e)

    items = service.get_category_breakdown(start, end)
    if not items:
        click.echo("No expenses in this period.")
        return

    total = sum(item.total_cents for item in items)
    for item in items:
        share = item.total_cents / total * 100
        click.echo(f"{item.name:24s} {format_cents(item.total_cents):>12s} {share:5.1f}%")
    click.echo("-" * 44)
    click.echo(f"{'Total':24s} {format_cents(total):>12s}")


@summary_group.command("trends")
@click.option("--months", type=int, default=6, show_default=True)
@click.pass_context
def trends(ctx, months: int):
    """Income and expenses per month."""
    for row in SummaryService(ctx.obj["db"]).get_monthly_trends(months=months):
        click.echo(
            f"{row.month:%Y-%m} | income {format_cents(row.income):>12s} | "
            f"expenses {format_cents(row.expenses):>12s}"
        )


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary_group, name="summary")
