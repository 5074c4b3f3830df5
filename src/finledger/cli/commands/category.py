"""Category management commands."""

import click
from finledger.cli.error_handling import handle_domain_error
from finledger.domain.category import CategoryService


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("create")
@click.argument("name")
@click.option("--income", is_flag=True, help="Category collects income")
@click.option("--icon", help="Display icon")
@click.option("--color", help="Display color as #RRGGBB")
@click.pass_context
def create_category(ctx, name: str, income: bool, icon: str | None, color: str | None):
    """Create a new category.

    Examples:
        finledger category create "Pets"
        finledger category create "Side Gig" --income --color "#10B981"
    """
    service = CategoryService(ctx.obj["db"])
    try:
        category = service.create_category(name=name, is_income=income, icon=icon, color=color)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created category '{category.name}' (ID: {category.id})")


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List all categories."""
    service = CategoryService(ctx.obj["db"])
    categories = service.list_categories()
    if not categories:
        click.echo("No categories found. Run 'finledger init-categories' to add the defaults.")
        return

    for cat in categories:
        kind = "income" if cat.is_income else "expense"
        click.echo(f"ID: {cat.id:3d} | {cat.icon or ' '} {cat.name:20s} | {kind}")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
