"""Account management commands."""

import click
from finledger.cli.error_handling import handle_domain_error
from finledger.cli.parsing import parse_cents_or_exit, resolve_account_or_exit
from finledger.domain.account import AccountService
from finledger.domain.entities import AccountType
from finledger.utils.amount_parser import format_cents

ACCOUNT_TYPES = click.Choice([t.value for t in AccountType])


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--type", "account_type", type=ACCOUNT_TYPES, default="checking", show_default=True)
@click.option("--currency", default="EUR", show_default=True, help="Three-letter currency code")
@click.option("--balance", default="0", help="Initial balance (e.g. 1250.00)")
@click.option("--institution", help="Bank or institution name")
@click.pass_context
def create_account(ctx, name: str, account_type: str, currency: str, balance: str, institution: str | None):
    """Create a new account.

    The initial balance is both the opening and the current balance.

    Examples:
        finledger account create "Main Checking" --balance 1250.00
        finledger account create "Visa" --type credit_card --institution "ING"
    """
    service = AccountService(ctx.obj["db"])
    initial = parse_cents_or_exit(ctx, balance)

    try:
        account = service.create_account(
            name=name,
            type=account_type,
            currency=currency,
            initial_balance=initial,
            institution=institution,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account '{account.name}' (ID: {account.id})")


@account_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include deleted accounts")
@click.pass_context
def list_accounts(ctx, include_inactive: bool):
    """List accounts with their balances."""
    service = AccountService(ctx.obj["db"])

    accounts = service.list_accounts(include_inactive=include_inactive)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 72)
    for acc in accounts:
        flags = "" if acc.is_active else " (inactive)"
        click.echo(
            f"ID: {acc.id:3d} | {acc.name:20s} | {acc.type.value:11s} | "
            f"{format_cents(acc.current_balance, acc.currency):>16s}{flags}"
        )


@account_group.command("show")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_account(ctx, account: str):
    """Show one account. ACCOUNT can be a name or ID."""
    service = AccountService(ctx.obj["db"])
    acc = service.get_account(resolve_account_or_exit(ctx, account))

    click.echo(f"ID:              {acc.id}")
    click.echo(f"Name:            {acc.name}")
    click.echo(f"Type:            {acc.type.value}")
    click.echo(f"Institution:     {acc.institution or '-'}")
    click.echo(f"Opening balance: {format_cents(acc.opening_balance, acc.currency)}")
    click.echo(f"Current balance: {format_cents(acc.current_balance, acc.currency)}")
    if acc.linked_to_account_id is not None:
        click.echo(f"Linked to:       {acc.linked_to_account_id}")
    if acc.hide_from_dashboard:
        click.echo("Hidden from dashboard")
    if not acc.is_active:
        click.echo("Inactive")


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New account name")
@click.option("--type", "account_type", type=ACCOUNT_TYPES, help="New account type")
@click.option("--currency", help="New currency code")
@click.option("--institution", help="New institution name")
@click.option("--hide/--show", "hide", default=None, help="Hide or show on the dashboard")
@click.pass_context
def update_account(
    ctx,
    account: str,
    name: str | None,
    account_type: str | None,
    currency: str | None,
    institution: str | None,
    hide: bool | None,
) -> None:
    """Update account details. Only the given fields change.

    Examples:
        finledger account update "Visa" --name "Visa Gold"
        finledger account update 3 --hide
    """
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, account)

    changes = {}
    if name is not None:
        changes["name"] = name
    if account_type is not None:
        changes["type"] = account_type
    if currency is not None:
        changes["currency"] = currency
    if institution is not None:
        changes["institution"] = institution
    if hide is not None:
        changes["hide_from_dashboard"] = hide
    if not changes:
        click.echo("Nothing to update.")
        return

    try:
        service.update_account(account_id, **changes)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated account {account_id}")


@account_group.command("link")
@click.argument("account", metavar="ACCOUNT")
@click.argument("target", metavar="TARGET", required=False)
@click.pass_context
def link_account(ctx, account: str, target: str | None) -> None:
    """Group ACCOUNT under TARGET for display; omit TARGET to unlink."""
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, account)
    target_id = resolve_account_or_exit(ctx, target) if target is not None else None

    try:
        service.update_account(account_id, linked_to_account_id=target_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    if target_id is None:
        click.echo(f"Unlinked account {account_id}")
    else:
        click.echo(f"Linked account {account_id} to account {target_id}")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Deactivate an account. Its transactions are kept.

    Examples:
        finledger account delete "Old Savings"
    """
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, account)
    account_obj = service.get_account(account_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete account '{account_obj.name}' (ID: {account_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    service.delete_account(account_id)
    click.echo(f"Deleted account '{account_obj.name}'")


@account_group.command("recalculate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def recalculate_balance(ctx, account: str) -> None:
    """Rebuild the current balance from opening balance plus all transactions."""
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, account)
    before = service.get_account(account_id)

    balance = service.recalculate_balance(account_id)
    click.echo(
        f"Balance of '{before.name}': {format_cents(before.current_balance)} -> "
        f"{format_cents(balance)}"
    )


@account_group.command("check")
@click.pass_context
def check_balances(ctx) -> None:
    """Report accounts whose stored balance disagrees with their transactions."""
    service = AccountService(ctx.obj["db"])

    drifted = 0
    for acc in service.list_accounts(include_inactive=True):
        drift = service.get_balance_drift(acc.id)
        if drift:
            drifted += 1
            click.echo(f"{acc.name}: off by {format_cents(drift, acc.currency)}")

    if drifted:
        click.echo(f"{drifted} account(s) out of balance. Run 'account recalculate' to repair.")
        ctx.exit(1)
    click.echo("All balances consistent.")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
