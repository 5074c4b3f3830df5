"""Dashboard summary domain service.

Transactions flagged as transfers move money between the user's own
accounts, so they never count as income or expenses here.
"""

from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from finledger.database.base import Database
from finledger.domain.entities import (
    ASSET_ACCOUNT_TYPES,
    LIABILITY_ACCOUNT_TYPES,
    Account,
    CategoryBreakdownItem,
    DashboardStats,
    MonthlyTotals,
    Transaction,
)
from finledger.utils.date_parser import month_range

UNCATEGORIZED_NAME = "Uncategorized"
UNCATEGORIZED_COLOR = "#6B7280"


def net_worth(accounts: Iterable[Account]) -> tuple[int, int, int]:
    """Return (net_worth, assets, liabilities) over active accounts.

    Liabilities count by absolute balance, whatever sign they are stored with.
    """
    assets = liabilities = 0
    for account in accounts:
        if not account.is_active:
            continue
        if account.type in ASSET_ACCOUNT_TYPES:
            assets += account.current_balance
        elif account.type in LIABILITY_ACCOUNT_TYPES:
            liabilities += abs(account.current_balance)
    return assets - liabilities, assets, liabilities


def income_and_expenses(transactions: Iterable[Transaction]) -> tuple[int, int]:
    """Sum positive and negative amounts, skipping transfers; both returned positive."""
    income = expenses = 0
    for txn in transactions:
        if txn.is_transfer:
            continue
        if txn.amount_cents > 0:
            income += txn.amount_cents
        else:
            expenses -= txn.amount_cents
    return income, expenses


def savings_rate(income: int, expenses: int) -> float:
    """Percentage of income not spent; 0 when there is no income."""
    if income <= 0:
        return 0.0
    return round((income - expenses) / income * 100, 2)


class SummaryService:
    """Service for dashboard figures and spending breakdowns."""

    def __init__(self, db: Database):
        """Initialize summary service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_dashboard_stats(self, month: Optional[str | date] = None) -> DashboardStats:
        """Net worth plus income, expenses and savings rate for one month.

        Args:
            month: ``YYYY-MM`` or any date in the month; defaults to this month
        """
        accounts = self.db.list_accounts()
        worth, assets, liabilities = net_worth(accounts)

        start, end = month_range(month)
        income, expenses = income_and_expenses(
            self.db.list_transactions(start_date=start, end_date=end, include_transfers=False)
        )
        return DashboardStats(
            net_worth=worth,
            total_assets=assets,
            total_liabilities=liabilities,
            monthly_income=income,
            monthly_expenses=expenses,
            savings_rate=savings_rate(income, expenses),
            accounts=tuple(a for a in accounts if not a.hide_from_dashboard),
        )

    def get_monthly_trends(self, months: int = 6, today: Optional[date] = None) -> list[MonthlyTotals]:
        """Income and expenses for each of the last ``months`` months, oldest first."""
        current = (today or date.today()).replace(day=1)
        trends = []
        for offset in range(months - 1, -1, -1):
            start, end = month_range(current - relativedelta(months=offset))
            income, expenses = income_and_expenses(
                self.db.list_transactions(start_date=start, end_date=end, include_transfers=False)
            )
            trends.append(MonthlyTotals(month=start, income=income, expenses=expenses))
        return trends

    def get_category_breakdown(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[CategoryBreakdownItem]:
        """Expense totals per category, largest first.

        Defaults to the current month when no dates are given.
        """
        if start_date is None and end_date is None:
            start_date, end_date = month_range()
        categories = {c.id: c for c in self.db.list_categories()}

        totals: dict[Optional[int], int] = defaultdict(int)
        for txn in self.db.list_transactions(
            start_date=start_date, end_date=end_date, include_transfers=False
        ):
            if txn.amount_cents < 0:
                totals[txn.category_id] += -txn.amount_cents

        items = []
        for category_id, total in totals.items():
            category = categories.get(category_id)
            items.append(
                CategoryBreakdownItem(
                    category_id=category_id,
                    name=category.name if category else UNCATEGORIZED_NAME,
                    total_cents=total,
                    color=(category.color if category else None) or UNCATEGORIZED_COLOR,
                )
            )
        items.sort(key=lambda item: (-item.total_cents, item.name))
        return items
