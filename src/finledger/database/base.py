"""Abstract database interface (the ledger store)."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional, Any, Iterable, Sequence
from datetime import date

# Import entities directly to avoid circular import through domain/__init__.py
from finledger.domain.entities import (
    Account,
    Category,
    Transaction,
    CategoryRule,
    RecurringRule,
    ImportBatch,
    ImportRow,
)


class Database(ABC):
    """Abstract database interface for finledger.

    Write methods commit immediately unless they run inside
    :meth:`transaction`, in which case everything commits or rolls back
    together when the outermost block exits.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Return a context manager grouping writes into one atomic unit."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        name: str,
        type: str,
        currency: str,
        opening_balance: int = 0,
        institution: Optional[str] = None,
    ) -> int:
        """Create an account whose current balance equals its opening balance."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self, include_inactive: bool = False) -> list[Account]:
        """List accounts, active ones only unless include_inactive is set."""
        pass

    @abstractmethod
    def update_account(self, account_id: int, **changes: Any) -> None:
        """Update descriptive account fields (name, type, currency, flags...)."""
        pass

    @abstractmethod
    def adjust_account_balance(
        self, account_id: int, current_delta: int = 0, opening_delta: int = 0
    ) -> None:
        """Add deltas to the stored balances as a single in-store update."""
        pass

    @abstractmethod
    def set_account_current_balance(self, account_id: int, current_balance: int) -> None:
        """Overwrite the stored current balance."""
        pass

    @abstractmethod
    def sum_account_transactions(self, account_id: int) -> int:
        """Sum amount_cents of every transaction of an account."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        name: str,
        is_income: bool = False,
        icon: Optional[str] = None,
        color: Optional[str] = None,
        parent_id: Optional[int] = None,
    ) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by exact name."""
        pass

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """List all categories ordered by name."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        account_id: int,
        date: date,
        amount_cents: int,
        description: str,
        currency: str = "EUR",
        category_id: Optional[int] = None,
        merchant: Optional[str] = None,
        notes: Optional[str] = None,
        external_id: Optional[str] = None,
        import_batch_id: Optional[int] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID.

        Balances are not touched here; callers pair this with
        :meth:`adjust_account_balance` inside :meth:`transaction`.
        """
        pass

    @abstractmethod
    def insert_transactions(
        self,
        rows: Sequence[ImportRow],
        import_batch_id: Optional[int] = None,
        category_ids: Optional[Sequence[Optional[int]]] = None,
        chunk_size: int = 100,
    ) -> int:
        """Insert many transactions in bounded-size chunks. Returns the count."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
        uncategorized: bool = False,
        include_transfers: bool = True,
    ) -> list[Transaction]:
        """List transactions with optional filters, newest first."""
        pass

    @abstractmethod
    def count_transactions(self, uncategorized: bool = False, transfers_only: bool = False) -> int:
        """Count transactions, optionally only uncategorized or transfer ones."""
        pass

    @abstractmethod
    def update_transaction(self, transaction_id: int, **changes: Any) -> None:
        """Update transaction fields (balances are not touched)."""
        pass

    @abstractmethod
    def set_transaction_categories(self, assignments: dict[int, Optional[int]]) -> None:
        """Write category IDs for many transactions at once."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction, unlinking any transfer partner."""
        pass

    @abstractmethod
    def find_existing_external_ids(self, external_ids: Iterable[str]) -> set[str]:
        """Return the subset of external_ids already present in the ledger."""
        pass

    @abstractmethod
    def link_transfer(self, outgoing_id: int, incoming_id: int) -> None:
        """Flag two transactions as a transfer pair pointing at each other."""
        pass

    @abstractmethod
    def unlink_transfer(self, transaction_id: int) -> None:
        """Clear transfer flags on a transaction and its partner."""
        pass

    # Import batch operations
    @abstractmethod
    def create_import_batch(
        self,
        filename: Optional[str],
        transaction_count: int,
        total_amount_cents: int,
        account_id: Optional[int] = None,
        preserve_balance: bool = False,
    ) -> int:
        """Create an import batch record. Returns batch ID."""
        pass

    @abstractmethod
    def get_import_batch(self, batch_id: int) -> Optional[ImportBatch]:
        """Get import batch by ID."""
        pass

    @abstractmethod
    def list_import_batches(self) -> list[ImportBatch]:
        """List import batches, newest first."""
        pass

    @abstractmethod
    def sum_transactions_by_account(self, import_batch_id: Optional[int] = None) -> dict[int, int]:
        """Sum amounts per account, for one batch or for the whole ledger."""
        pass

    @abstractmethod
    def delete_import_batch(self, batch_id: int) -> int:
        """Delete a batch and its transactions. Returns transactions deleted."""
        pass

    @abstractmethod
    def delete_all_transactions(self) -> int:
        """Delete every transaction and import batch. Returns transactions deleted."""
        pass

    # Category rule operations
    @abstractmethod
    def create_category_rule(
        self,
        category_id: int,
        pattern: str,
        match_type: str = "contains",
        case_sensitive: bool = False,
        priority: int = 0,
    ) -> int:
        """Create a category rule. Returns rule ID."""
        pass

    @abstractmethod
    def get_category_rule(self, rule_id: int) -> Optional[CategoryRule]:
        """Get category rule by ID."""
        pass

    @abstractmethod
    def list_category_rules(self, active_only: bool = False) -> list[CategoryRule]:
        """List rules by descending priority, ties in creation order."""
        pass

    @abstractmethod
    def update_category_rule(self, rule_id: int, **changes: Any) -> None:
        """Update category rule fields."""
        pass

    @abstractmethod
    def delete_category_rule(self, rule_id: int) -> None:
        """Delete a category rule."""
        pass

    # Recurring rule operations
    @abstractmethod
    def create_recurring_rule(
        self,
        account_id: int,
        name: str,
        amount_cents: int,
        frequency: str,
        start_date: date,
        next_date: date,
        category_id: Optional[int] = None,
        day_of_month: Optional[int] = None,
        end_date: Optional[date] = None,
    ) -> int:
        """Create a recurring rule. Returns rule ID."""
        pass

    @abstractmethod
    def get_recurring_rule(self, rule_id: int) -> Optional[RecurringRule]:
        """Get recurring rule by ID."""
        pass

    @abstractmethod
    def list_recurring_rules(self, active_only: bool = True) -> list[RecurringRule]:
        """List recurring rules ordered by next due date."""
        pass

    @abstractmethod
    def update_recurring_rule(self, rule_id: int, **changes: Any) -> None:
        """Update recurring rule fields."""
        pass
