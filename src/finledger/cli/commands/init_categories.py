"""Initialize default categories."""

import click
from finledger.domain.category import CategoryService


@click.command("init-categories")
@click.pass_context
def init_categories(ctx):
    """Create the default category set. Existing names are left alone."""
    service = CategoryService(ctx.obj["db"])

    created = service.init_default_categories()
    if created == 0:
        click.echo("Default categories already exist.")
        return
    click.echo(f"Created {created} categories.")


def register_commands(cli):
    """Register init-categories command with main CLI."""
    cli.add_command(init_categories)
