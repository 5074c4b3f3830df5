"""Balance reconciliation helpers.

Every account keeps ``current_balance == opening_balance + sum(amounts)``.
Writes keep this true incrementally, and there are two ways to absorb a
batch of new amounts:

* live mode: the amounts are new activity, so ``current_balance`` moves
  by their sum;
* historical mode ("preserve balance"): the amounts are past activity the
  user's hand-entered current balance already reflects, so
  ``opening_balance`` moves by minus their sum and ``current_balance`` is
  left alone.
"""

from collections import defaultdict
from typing import Iterable

from finledger.database.base import Database


def sum_by_account(entries: Iterable[tuple[int, int]]) -> dict[int, int]:
    """Aggregate ``(account_id, amount_cents)`` pairs per account."""
    totals: dict[int, int] = defaultdict(int)
    for account_id, amount in entries:
        totals[account_id] += amount
    return dict(totals)


def apply_account_sums(
    db: Database,
    sums: dict[int, int],
    preserve_balance: bool = False,
    reverse: bool = False,
) -> None:
    """Apply one balance update per account for amounts added (or removed).

    Args:
        db: Database instance
        sums: Net amount per account
        preserve_balance: Use historical mode instead of live mode
        reverse: The amounts are being removed rather than added
    """
    sign = -1 if reverse else 1
    for account_id, total in sorted(sums.items()):
        if not total:
            continue
        if preserve_balance:
            db.adjust_account_balance(account_id, opening_delta=-sign * total)
        else:
            db.adjust_account_balance(account_id, current_delta=sign * total)
