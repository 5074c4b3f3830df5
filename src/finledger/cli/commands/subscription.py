"""Subscription (recurring charge) commands."""

from datetime import date

import click
from dateutil.relativedelta import relativedelta
from finledger.cli.error_handling import handle_domain_error
from finledger.cli.parsing import (
    parse_cents_or_exit,
    parse_date_or_exit,
    resolve_account_or_exit,
    resolve_category_or_exit,
)
from finledger.domain.entities import Frequency
from finledger.domain.recurring import RecurringRuleService
from finledger.domain.subscriptions import SubscriptionService
from finledger.utils.amount_parser import format_cents

FREQUENCIES = click.Choice([f.value for f in Frequency])
NEXT_DUE = {
    Frequency.DAILY: relativedelta(days=1),
    Frequency.WEEKLY: relativedelta(weeks=1),
    Frequency.MONTHLY: relativedelta(months=1),
    Frequency.YEARLY: relativedelta(years=1),
}


@click.group()
def subscription_group():
    """Detect and track subscriptions."""
    pass


@subscription_group.command("detect")
@click.option("--accept", is_flag=True, help="Add every suggestion as a subscription")
@click.pass_context
def detect_subscriptions(ctx, accept: bool):
    """Suggest subscriptions from repeating charges."""
    db = ctx.obj["db"]
    suggestions = SubscriptionService(db).detect_subscriptions()
    if not suggestions:
        click.echo("No new subscriptions detected.")
        return

    rules = RecurringRuleService(db)
    for s in suggestions:
        click.echo(
            f"{s.merchant:30s} | {format_cents(s.avg_amount):>10s} {s.frequency.value:8s} | "
            f"{s.occurrences:3d}x | confidence {s.confidence:.2f} | last {s.last_date}"
        )
        if accept:
            rules.create_from_suggestion(s, start_date=s.last_date + NEXT_DUE[s.frequency])
    if accept:
        click.echo(f"Added {len(suggestions)} subscriptions.")


@subscription_group.command("add")
@click.argument("name")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--amount", required=True, help="Signed amount per charge (e.g. -15.99)")
@click.option("--frequency", type=FREQUENCIES, default="monthly", show_default=True)
@click.option("--start-date", default="today", show_default=True, help="First due date")
@click.option("--end-date", help="Last due date")
@click.option("--day", "day_of_month", type=int, help="Day of month the charge lands")
@click.option("--category", help="Category name or ID")
@click.pass_context
def add_subscription(
    ctx,
    name: str,
    account: str,
    amount: str,
    frequency: str,
    start_date: str,
    end_date: str | None,
    day_of_month: int | None,
    category: str | None,
):
    """Track a subscription by hand.

    Examples:
        finledger subscription add Netflix --account 1 --amount -15.99 --day 5
    """
    service = RecurringRuleService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, account)
    start: date = parse_date_or_exit(ctx, start_date)

    try:
        rule = service.create_rule(
            account_id=account_id,
            name=name,
            amount_cents=parse_cents_or_exit(ctx, amount),
            frequency=frequency,
            start_date=start,
            category_id=resolve_category_or_exit(ctx, category) if category else None,
            day_of_month=day_of_month,
            end_date=parse_date_or_exit(ctx, end_date) if end_date else None,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added subscription '{rule.name}' (ID: {rule.id}), next due {rule.next_date}")


@subscription_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include removed subscriptions")
@click.pass_context
def list_subscriptions(ctx, include_inactive: bool):
    """List subscriptions by next due date."""
    rules = RecurringRuleService(ctx.obj["db"]).list_rules(active_only=not include_inactive)
    if not rules:
        click.echo("No subscriptions.")
        return

    for rule in rules:
        status = "" if rule.is_active else " (inactive)"
        click.echo(
            f"ID: {rule.id:3d} | {rule.name:25s} | {format_cents(rule.amount_cents):>10s} "
            f"{rule.frequency.value:8s} | next {rule.next_date}{status}"
        )


@subscription_group.command("remove")
@click.argument("rule_id", type=int)
@click.pass_context
def remove_subscription(ctx, rule_id: int):
    """Stop tracking a subscription."""
    try:
        RecurringRuleService(ctx.obj["db"]).deactivate_rule(rule_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Removed subscription {rule_id}")


def register_commands(cli):
    """Register subscription commands with main CLI."""
    cli.add_command(subscription_group, name="subscription")
