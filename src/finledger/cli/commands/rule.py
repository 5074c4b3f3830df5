"""Categorization rule commands."""

import click
from finledger.cli.error_handling import handle_domain_error
from finledger.cli.parsing import resolve_category_or_exit
from finledger.domain.category import CategoryService
from finledger.domain.entities import MatchType
from finledger.domain.rules import CategoryRuleService
from finledger.utils.amount_parser import format_cents

MATCH_TYPES = click.Choice([m.value for m in MatchType])


@click.group()
def rule_group():
    """Manage categorization rules."""
    pass


@rule_group.command("create")
@click.argument("pattern")
@click.argument("category")
@click.option("--match", "match_type", type=MATCH_TYPES, default="contains", show_default=True)
@click.option("--case-sensitive", is_flag=True, help="Match case exactly")
@click.option("--priority", type=int, default=0, show_default=True, help="Higher wins")
@click.pass_context
def create_rule(ctx, pattern: str, category: str, match_type: str, case_sensitive: bool, priority: int):
    """Create a rule assigning CATEGORY to transactions matching PATTERN.

    Examples:
        finledger rule create netflix Subscriptions
        finledger rule create "^ALBERT HEIJN" Groceries --match regex --priority 10
    """
    service = CategoryRuleService(ctx.obj["db"])
    category_id = resolve_category_or_exit(ctx, category)

    try:
        rule = service.create_rule(
            pattern=pattern,
            category_id=category_id,
            match_type=match_type,
            case_sensitive=case_sensitive,
            priority=priority,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created rule {rule.id}: {rule.match_type.value} '{rule.pattern}' -> {category}")


@rule_group.command("list")
@click.pass_context
def list_rules(ctx):
    """List rules in evaluation order."""
    db = ctx.obj["db"]
    rules = CategoryRuleService(db).list_rules()
    if not rules:
        click.echo("No rules found.")
        return

    categories = {c.id: c.name for c in CategoryService(db).list_categories()}
    for rule in rules:
        flags = []
        if rule.case_sensitive:
            flags.append("case-sensitive")
        if not rule.is_active:
            flags.append("inactive")
        suffix = f" ({', '.join(flags)})" if flags else ""
        click.echo(
            f"ID: {rule.id:3d} | prio {rule.priority:3d} | {rule.match_type.value:11s} | "
            f"{rule.pattern:30s} -> {categories.get(rule.category_id, rule.category_id)}{suffix}"
        )


@rule_group.command("update")
@click.argument("rule_id", type=int)
@click.option("--pattern", help="New pattern")
@click.option("--category", help="New category name or ID")
@click.option("--match", "match_type", type=MATCH_TYPES, help="New match type")
@click.option("--case-sensitive/--ignore-case", "case_sensitive", default=None)
@click.option("--priority", type=int, help="New priority")
@click.option("--active/--inactive", "active", default=None, help="Enable or disable the rule")
@click.pass_context
def update_rule(
    ctx,
    rule_id: int,
    pattern: str | None,
    category: str | None,
    match_type: str | None,
    case_sensitive: bool | None,
    priority: int | None,
    active: bool | None,
) -> None:
    """Update a rule. Only the given fields change."""
    service = CategoryRuleService(ctx.obj["db"])

    changes = {}
    if pattern is not None:
        changes["pattern"] = pattern
    if category is not None:
        changes["category_id"] = resolve_category_or_exit(ctx, category)
    if match_type is not None:
        changes["match_type"] = match_type
    if case_sensitive is not None:
        changes["case_sensitive"] = case_sensitive
    if priority is not None:
        changes["priority"] = priority
    if active is not None:
        changes["is_active"] = active
    if not changes:
        click.echo("Nothing to update.")
        return

    try:
        service.update_rule(rule_id, **changes)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated rule {rule_id}")


@rule_group.command("delete")
@click.argument("rule_id", type=int)
@click.pass_context
def delete_rule(ctx, rule_id: int) -> None:
    """Delete a rule."""
    try:
        CategoryRuleService(ctx.obj["db"]).delete_rule(rule_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted rule {rule_id}")


@rule_group.command("apply")
@click.pass_context
def apply_rules(ctx) -> None:
    """Categorize uncategorized transactions using the active rules."""
    result = CategoryRuleService(ctx.obj["db"]).apply_rules()
    click.echo(f"Categorized {result.categorized} of {result.total} uncategorized transactions")


@rule_group.command("test")
@click.argument("description")
@click.option("--merchant", help="Merchant name")
@click.pass_context
def test_rules(ctx, description: str, merchant: str | None) -> None:
    """Show which category the rules would pick for a description."""
    db = ctx.obj["db"]
    category_id = CategoryRuleService(db).find_category_for_transaction(description, merchant)
    if category_id is None:
        click.echo("No rule matches.")
        return
    category = CategoryService(db).get_category(category_id)
    click.echo(f"Category: {category.name} (ID: {category_id})")


@rule_group.command("suggest")
@click.option("--limit", type=int, default=20, show_default=True)
@click.pass_context
def suggest_rules(ctx, limit: int) -> None:
    """Suggest rule patterns from recurring uncategorized descriptions."""
    recommendations = CategoryRuleService(ctx.obj["db"]).get_recommendations(limit=limit)
    if not recommendations:
        click.echo("No suggestions.")
        return

    for rec in recommendations:
        click.echo(f"{rec.pattern:30s} | {rec.count:4d}x | {format_cents(rec.total_cents):>12s}")
        for example in rec.examples:
            click.echo(f"    e.g. {example}")


def register_commands(cli):
    """Register rule commands with main CLI."""
    cli.add_command(rule_group, name="rule")
