"""CLI helpers for resolving references and parsing option values."""

from __future__ import annotations

from datetime import date
from typing import Callable, TypeVar

import click
from finledger.cli.error_handling import handle_domain_error
from finledger.domain.account import AccountService
from finledger.domain.category import CategoryService
from finledger.utils.account_resolver import resolve_account
from finledger.utils.amount_parser import parse_amount_cents
from finledger.utils.date_parser import parse_date

T = TypeVar("T")


def _or_exit(ctx: click.Context, parse: Callable[[], T], label: str | None = None) -> T:
    try:
        return parse()
    except ValueError as exc:
        if label:
            exc = ValueError(f"Invalid {label}: {exc}")
        handle_domain_error(ctx, exc)


def resolve_account_or_exit(ctx: click.Context, account: str | int) -> int:
    """Resolve account name or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    service = AccountService(ctx.obj["db"])
    return _or_exit(ctx, lambda: resolve_account(service, account))


def resolve_category_or_exit(ctx: click.Context, category: str) -> int:
    """Resolve category name or ID, or exit with a CLI error."""
    service = CategoryService(ctx.obj["db"])
    return _or_exit(ctx, lambda: service.resolve_category(category).id)


def parse_date_or_exit(ctx: click.Context, value: str, day_first: bool = False) -> date:
    """Parse a date option, or exit with a CLI error."""
    return _or_exit(ctx, lambda: parse_date(value, day_first=day_first), "date")


def parse_cents_or_exit(ctx: click.Context, value: str) -> int:
    """Parse an amount option to cents, or exit with a CLI error."""
    return _or_exit(ctx, lambda: parse_amount_cents(value), "amount")
