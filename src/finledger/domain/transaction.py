"""Transaction domain service."""

import csv
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Optional, TextIO

from finledger.database.base import Database
from finledger.domain.account import normalize_currency
from finledger.domain.entities import Transaction as TransactionEntity
from finledger.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    category_not_found,
    transaction_not_found,
)
from finledger.domain.rules import CategoryRuleService

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ["Date", "Description", "Merchant", "Amount", "Currency", "Category", "Account", "Notes"]


def _validate_amount(amount_cents: Any) -> None:
    if not isinstance(amount_cents, int) or isinstance(amount_cents, bool):
        raise ValidationError("Amount must be an integer number of cents")
    if amount_cents == 0:
        raise ValidationError("Amount cannot be zero")


class TransactionService:
    """Service for managing transactions.

    Every write keeps the owning account's current balance in step with the
    ledger inside one database transaction.
    """

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db
        self.rule_service = CategoryRuleService(db)

    def _require(self, transaction_id: int) -> TransactionEntity:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def _require_category(self, category_id: Optional[int]) -> None:
        if category_id is not None and self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

    def create_transaction(
        self,
        account_id: int,
        date: date,
        amount_cents: int,
        description: str,
        category_id: Optional[int] = None,
        merchant: Optional[str] = None,
        notes: Optional[str] = None,
        currency: Optional[str] = None,
        auto_categorize: bool = True,
    ) -> TransactionEntity:
        """Create a transaction and add its amount to the account balance.

        Args:
            account_id: Account ID
            date: Transaction date
            amount_cents: Signed amount in cents, never zero
            description: Description text
            category_id: Optional category ID; when omitted the active
                category rules pick one
            merchant: Optional merchant
            notes: Optional notes
            currency: Currency code, defaults to the account's currency
            auto_categorize: Run the rule engine when no category is given

        Returns:
            The created transaction

        Raises:
            ValidationError: If a field is invalid
            NotFoundError: If account or category doesn't exist
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        _validate_amount(amount_cents)
        description = (description or "").strip()
        if not description:
            raise ValidationError("Description cannot be empty")
        self._require_category(category_id)
        currency = normalize_currency(currency or account.currency)

        if category_id is None and auto_categorize:
            category_id = self.rule_service.find_category_for_transaction(description, merchant)

        with self.db.transaction():
            transaction_id = self.db.create_transaction(
                account_id=account_id,
                date=date,
                amount_cents=amount_cents,
                description=description,
                currency=currency,
                category_id=category_id,
                merchant=merchant,
                notes=notes,
            )
            self.db.adjust_account_balance(account_id, current_delta=amount_cents)
        return self.db.get_transaction(transaction_id)

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def update_transaction(self, transaction_id: int, **changes: Any) -> TransactionEntity:
        """Update transaction fields.

        Changing the amount or the account moves the balance effect: the old
        amount leaves the old account and the new amount lands on the new one.

        Raises:
            NotFoundError: If the transaction, account or category doesn't exist
            ValidationError: If a field is invalid
        """
        txn = self._require(transaction_id)

        new_account_id = changes.get("account_id", txn.account_id)
        new_amount = changes.get("amount_cents", txn.amount_cents)
        if "amount_cents" in changes:
            _validate_amount(new_amount)
        if "account_id" in changes and self.db.get_account(new_account_id) is None:
            raise NotFoundError(account_not_found(new_account_id))
        if "description" in changes:
            changes["description"] = (changes["description"] or "").strip()
            if not changes["description"]:
                raise ValidationError("Description cannot be empty")
        if "currency" in changes:
            changes["currency"] = normalize_currency(changes["currency"])
        if "category_id" in changes:
            self._require_category(changes["category_id"])

        with self.db.transaction():
            self.db.update_transaction(transaction_id, **changes)
            if new_account_id != txn.account_id or new_amount != txn.amount_cents:
                self.db.adjust_account_balance(txn.account_id, current_delta=-txn.amount_cents)
                self.db.adjust_account_balance(new_account_id, current_delta=new_amount)
        return self.db.get_transaction(transaction_id)

    def set_category(self, transaction_id: int, category_id: Optional[int]) -> None:
        """Set or clear (None) the category of one transaction."""
        self._require(transaction_id)
        self._require_category(category_id)
        self.db.update_transaction(transaction_id, category_id=category_id)

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction and take its amount back out of the balance."""
        txn = self._require(transaction_id)
        with self.db.transaction():
            self.db.delete_transaction(transaction_id)
            self.db.adjust_account_balance(txn.account_id, current_delta=-txn.amount_cents)
        logger.info("Deleted transaction %d (%d cents)", transaction_id, txn.amount_cents)

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
        uncategorized: bool = False,
        include_transfers: bool = True,
    ) -> list[TransactionEntity]:
        """List transactions with filters, newest first."""
        return self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            account_id=account_id,
            category_id=category_id,
            uncategorized=uncategorized,
            include_transfers=include_transfers,
        )

    def count_uncategorized(self) -> int:
        """Number of transactions without a category."""
        return self.db.count_transactions(uncategorized=True)

    def export_csv(self, out: TextIO, **filters: Any) -> int:
        """Write transactions as CSV to an open text stream.

        Accepts the same filters as list_transactions.

        Returns:
            Number of rows written
        """
        categories = {c.id: c.name for c in self.db.list_categories()}
        accounts = {a.id: a.name for a in self.db.list_accounts(include_inactive=True)}
        transactions = self.list_transactions(**filters)

        writer = csv.writer(out)
        writer.writerow(EXPORT_COLUMNS)
        for txn in transactions:
            writer.writerow(
                [
                    txn.date.isoformat(),
                    txn.description,
                    txn.merchant or "",
                    str(Decimal(txn.amount_cents).scaleb(-2)),
                    txn.currency,
                    categories.get(txn.category_id, ""),
                    accounts.get(txn.account_id, ""),
                    txn.notes or "",
                ]
            )
        return len(transactions)
