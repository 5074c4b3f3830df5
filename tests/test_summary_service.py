"""Tests for SummaryService and the dashboard helpers."""

from datetime import date

import pytest

from finledger.domain.summary import UNCATEGORIZED_NAME, savings_rate


@pytest.fixture
def ledger(account_service, transaction_service, transfer_service, sample_account, savings_account, sample_categories):
    """A small January 2024 ledger with one marked transfer."""
    card = account_service.create_account(name="Visa", type="credit_card", initial_balance=-30000)

    def add(account, day, amount, category=None, month=1):
        return transaction_service.create_transaction(
            account_id=account.id,
            date=date(2024, month, day),
            amount_cents=amount,
            description=f"T{month}-{day}",
            category_id=sample_categories[category] if category else None,
            auto_categorize=False,
        )

    add(sample_account, 1, 300000, "Salary")
    add(sample_account, 3, -120000, "Housing")
    add(sample_account, 5, -15000, "Groceries")
    add(card, 6, -5000, "Groceries")
    add(sample_account, 7, -2000)
    out = add(sample_account, 10, -50000)
    inc = add(savings_account, 10, 50000)
    transfer_service.mark_as_transfer(out.id, inc.id)
    add(sample_account, 2, -9999, "Groceries", month=2)
    return card


class TestHelpers:
    @pytest.mark.parametrize(
        "income, expenses, expected",
        [(1000, 250, 75.0), (0, 100, 0.0), (1000, 1500, -50.0), (3, 1, 66.67)],
    )
    def test_savings_rate(self, income, expenses, expected):
        assert savings_rate(income, expenses) == expected


class TestDashboard:
    def test_dashboard_stats(self, summary_service, account_service, sample_account, ledger):
        stats = summary_service.get_dashboard_stats("2024-01")

        checking = account_service.get_account(sample_account.id).current_balance
        assert stats.monthly_income == 300000
        assert stats.monthly_expenses == 120000 + 15000 + 5000 + 2000
        assert stats.savings_rate == round((300000 - 142000) / 300000 * 100, 2)
        assert stats.total_liabilities == 35000
        assert stats.total_assets == checking + 50000
        assert stats.net_worth == stats.total_assets - stats.total_liabilities

    def test_hidden_and_inactive_accounts(self, summary_service, account_service, savings_account, ledger):
        account_service.update_account(ledger.id, hide_from_dashboard=True)
        account_service.delete_account(savings_account.id)

        stats = summary_service.get_dashboard_stats(date(2024, 1, 20))

        assert [a.name for a in stats.accounts] == ["Checking"]
        assert stats.total_liabilities == 35000

    def test_empty_month(self, summary_service, ledger):
        stats = summary_service.get_dashboard_stats("2023-06")
        assert (stats.monthly_income, stats.monthly_expenses, stats.savings_rate) == (0, 0, 0.0)


class TestBreakdownAndTrends:
    def test_category_breakdown(self, summary_service, sample_categories, ledger):
        items = summary_service.get_category_breakdown(date(2024, 1, 1), date(2024, 1, 31))

        assert [(i.name, i.total_cents) for i in items] == [
            ("Housing", 120000),
            ("Groceries", 20000),
            (UNCATEGORIZED_NAME, 2000),
        ]
        assert items[-1].category_id is None
        assert items[-1].color == "#6B7280"

    def test_monthly_trends(self, summary_service, ledger):
        trends = summary_service.get_monthly_trends(months=3, today=date(2024, 2, 20))

        assert [t.month for t in trends] == [date(2023, 12, 1), date(2024, 1, 1), date(2024, 2, 1)]
        assert [(t.income, t.expenses) for t in trends] == [(0, 0), (300000, 142000), (0, 9999)]
