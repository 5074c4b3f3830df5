"""Shared pytest fixtures for finledger tests."""

import os
import tempfile
from datetime import date

import pytest

from finledger.database.factories import create_sqlite_database
from finledger.domain.account import AccountService
from finledger.domain.category import CategoryService
from finledger.domain.csv_import import ImportService
from finledger.domain.entities import ImportRow, Transaction
from finledger.domain.recurring import RecurringRuleService
from finledger.domain.rules import CategoryRuleService
from finledger.domain.subscriptions import SubscriptionService
from finledger.domain.summary import SummaryService
from finledger.domain.transaction import TransactionService
from finledger.domain.transfers import TransferService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def rule_service(temp_db):
    """Create a CategoryRuleService with a temporary database."""
    return CategoryRuleService(temp_db)


@pytest.fixture
def import_service(temp_db):
    """Create an ImportService with a temporary database."""
    return ImportService(temp_db)


@pytest.fixture
def transfer_service(temp_db):
    """Create a TransferService with a temporary database."""
    return TransferService(temp_db)


@pytest.fixture
def subscription_service(temp_db):
    """Create a SubscriptionService with a temporary database."""
    return SubscriptionService(temp_db)


@pytest.fixture
def recurring_service(temp_db):
    """Create a RecurringRuleService with a temporary database."""
    return RecurringRuleService(temp_db)


@pytest.fixture
def summary_service(temp_db):
    """Create a SummaryService with a temporary database."""
    return SummaryService(temp_db)


@pytest.fixture
def sample_account(account_service):
    """Checking account opened with 1000.00."""
    return account_service.create_account(name="Checking", type="checking", initial_balance=100000)


@pytest.fixture
def savings_account(account_service):
    """Empty savings account."""
    return account_service.create_account(name="Savings", type="savings")


@pytest.fixture
def sample_categories(category_service):
    """Initialize default categories and return name -> ID."""
    category_service.init_default_categories()
    return {c.name: c.id for c in category_service.list_categories()}


@pytest.fixture
def make_row():
    """Build ImportRow objects with sensible defaults."""

    def _make_row(account_id, amount_cents, when=date(2024, 1, 1), description="Row", **kwargs):
        return ImportRow(
            account_id=account_id,
            date=when,
            amount_cents=amount_cents,
            description=description,
            **kwargs,
        )

    return _make_row


@pytest.fixture
def make_txn():
    """Build in-memory Transaction entities for the pure detectors."""
    counter = {"id": 0}

    def _make_txn(account_id, amount_cents, when, description="Txn", **kwargs):
        counter["id"] += 1
        kwargs.setdefault("currency", "EUR")
        return Transaction(
            id=kwargs.pop("id", counter["id"]),
            account_id=account_id,
            date=when,
            amount_cents=amount_cents,
            description=description,
            **kwargs,
        )

    return _make_txn


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
