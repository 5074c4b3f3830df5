"""Utility functions for finledger."""

from finledger.utils.date_parser import parse_date, month_range
from finledger.utils.amount_parser import parse_amount, parse_amount_cents, to_cents, format_cents
from finledger.utils.account_resolver import resolve_account

__all__ = [
    "parse_date",
    "month_range",
    "parse_amount",
    "parse_amount_cents",
    "to_cents",
    "format_cents",
    "resolve_account",
]
