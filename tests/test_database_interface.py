"""Tests for the SQLAlchemy Database implementation."""

from datetime import date, datetime

import pytest

from finledger.domain import entities
from finledger.domain.errors import NotFoundError, ValidationError


@pytest.fixture
def account_id(temp_db):
    return temp_db.create_account(name="Checking", type="checking", currency="EUR", opening_balance=1000)


class TestDatabaseInterface:
    """The database hands out domain entities, never ORM objects."""

    def test_get_account_returns_domain_model(self, temp_db, account_id):
        account = temp_db.get_account(account_id)

        assert isinstance(account, entities.Account)
        assert account.type == entities.AccountType.CHECKING
        assert account.opening_balance == account.current_balance == 1000
        assert isinstance(account.created_at, datetime)

    def test_missing_rows_return_none(self, temp_db):
        assert temp_db.get_account(1) is None
        assert temp_db.get_transaction(1) is None
        assert temp_db.get_category(1) is None
        assert temp_db.get_import_batch(1) is None

    def test_transaction_round_trip(self, temp_db, account_id):
        transaction_id = temp_db.create_transaction(
            account_id=account_id,
            date=date(2024, 1, 15),
            amount_cents=-1250,
            description="Coffee",
            merchant="Cafe",
            external_id="abc",
        )

        txn = temp_db.get_transaction(transaction_id)

        assert isinstance(txn, entities.Transaction)
        assert txn.date == date(2024, 1, 15)
        assert txn.amount_cents == -1250
        assert txn.currency == "EUR"
        assert txn.is_transfer is False

    def test_rule_enums_are_mapped(self, temp_db):
        category_id = temp_db.create_category(name="Other")
        rule_id = temp_db.create_category_rule(category_id, "x", match_type="regex")

        assert temp_db.get_category_rule(rule_id).match_type == entities.MatchType.REGEX

    def test_adjust_account_balance(self, temp_db, account_id):
        temp_db.adjust_account_balance(account_id, current_delta=-200, opening_delta=50)

        account = temp_db.get_account(account_id)
        assert (account.opening_balance, account.current_balance) == (1050, 800)

    def test_adjust_missing_account(self, temp_db):
        with pytest.raises(NotFoundError):
            temp_db.adjust_account_balance(999, current_delta=1)

    def test_update_rejects_balance_fields(self, temp_db, account_id):
        with pytest.raises(ValidationError, match="current_balance"):
            temp_db.update_account(account_id, name="Main", current_balance=1)

        assert temp_db.get_account(account_id).current_balance == 1000


class TestAtomicBlocks:
    def test_exception_rolls_back_everything(self, temp_db, account_id):
        with pytest.raises(RuntimeError):
            with temp_db.transaction():
                temp_db.create_transaction(
                    account_id=account_id, date=date(2024, 1, 1), amount_cents=-5, description="Lost"
                )
                temp_db.adjust_account_balance(account_id, current_delta=-5)
                raise RuntimeError("boom")

        assert temp_db.list_transactions() == []
        assert temp_db.get_account(account_id).current_balance == 1000

    def test_nested_blocks_commit_once(self, temp_db, account_id):
        with temp_db.transaction():
            with temp_db.transaction():
                temp_db.adjust_account_balance(account_id, current_delta=5)
            temp_db.adjust_account_balance(account_id, current_delta=5)

        temp_db.disconnect()
        assert temp_db.get_account(account_id).current_balance == 1010


class TestExternalIds:
    def test_find_existing_external_ids(self, temp_db, account_id):
        for external_id in ["a", "b", None]:
            temp_db.create_transaction(
                account_id=account_id,
                date=date(2024, 1, 1),
                amount_cents=-1,
                description="x",
                external_id=external_id,
            )

        assert temp_db.find_existing_external_ids(["a", "c", "", None]) == {"a"}
        assert temp_db.find_existing_external_ids([]) == set()

    def test_lookup_spans_chunks(self, temp_db, account_id):
        rows = [
            entities.ImportRow(
                account_id=account_id, date=date(2024, 1, 1), amount_cents=-1, description="x", external_id=f"e{i}"
            )
            for i in range(1200)
        ]
        temp_db.insert_transactions(rows)

        found = temp_db.find_existing_external_ids(f"e{i}" for i in range(0, 2400, 2))

        assert found == {f"e{i}" for i in range(0, 1200, 2)}
