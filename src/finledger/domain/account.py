"""Account domain service."""

import logging
import re
from typing import Any, Optional

from finledger.database.base import Database
from finledger.domain.entities import Account as AccountEntity, AccountType
from finledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    invalid_choice,
)

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "EUR"
_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")


def parse_account_type(value: Any) -> AccountType:
    """Coerce a string or AccountType into AccountType."""
    try:
        return AccountType(value)
    except ValueError:
        raise ValidationError(invalid_choice("account type", value, AccountType)) from None


def normalize_currency(currency: Optional[str]) -> str:
    """Upper-case and validate a three-letter currency code."""
    code = (currency or DEFAULT_CURRENCY).strip().upper()
    if not _CURRENCY_CODE.match(code):
        raise ValidationError(f"Invalid currency code '{currency}': expected three letters")
    return code


class AccountService:
    """Service for managing accounts and reconciling their balances."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require(self, account_id: int) -> AccountEntity:
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def _check_unique_name(self, name: str, exclude_id: Optional[int] = None) -> None:
        for acc in self.db.list_accounts(include_inactive=True):
            if acc.id != exclude_id and acc.name == name:
                raise ConflictError(f"Account with name '{name}' already exists")

    def create_account(
        self,
        name: str,
        type: AccountType | str,
        currency: str = DEFAULT_CURRENCY,
        initial_balance: int = 0,
        institution: Optional[str] = None,
    ) -> AccountEntity:
        """Create a new account.

        The initial balance becomes both the opening and the current balance.

        Args:
            name: Account name
            type: Account type
            currency: Three-letter currency code
            initial_balance: Starting balance in cents
            institution: Optional bank or institution name

        Returns:
            The created account

        Raises:
            ValidationError: If a field is invalid
            ConflictError: If account name already exists
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Account name cannot be empty")
        account_type = parse_account_type(type)
        currency = normalize_currency(currency)
        if not isinstance(initial_balance, int):
            raise ValidationError("Initial balance must be an integer number of cents")
        self._check_unique_name(name)

        account_id = self.db.create_account(
            name=name,
            type=account_type.value,
            currency=currency,
            opening_balance=initial_balance,
            institution=institution,
        )
        return self.db.get_account(account_id)

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def list_accounts(self, include_inactive: bool = False) -> list[AccountEntity]:
        """List accounts, active ones only unless include_inactive is set."""
        return self.db.list_accounts(include_inactive=include_inactive)

    def update_account(self, account_id: int, **changes: Any) -> AccountEntity:
        """Update name, type, currency, institution, linkage or dashboard visibility.

        Balances cannot be edited here; they follow the ledger.

        Raises:
            NotFoundError: If the account or linked account doesn't exist
            ValidationError: If a field is invalid
            ConflictError: If the new name is taken
        """
        self._require(account_id)

        if "name" in changes:
            changes["name"] = (changes["name"] or "").strip()
            if not changes["name"]:
                raise ValidationError("Account name cannot be empty")
            self._check_unique_name(changes["name"], exclude_id=account_id)
        if "type" in changes:
            changes["type"] = parse_account_type(changes["type"]).value
        if "currency" in changes:
            changes["currency"] = normalize_currency(changes["currency"])
        linked_id = changes.get("linked_to_account_id")
        if linked_id is not None:
            if linked_id == account_id:
                raise ValidationError("An account cannot be linked to itself")
            self._require(linked_id)

        self.db.update_account(account_id, **changes)
        return self.db.get_account(account_id)

    def delete_account(self, account_id: int) -> None:
        """Soft-delete an account; its transactions stay in the ledger."""
        self._require(account_id)
        self.db.update_account(account_id, is_active=False)
        logger.info("Deactivated account %d", account_id)

    def recalculate_balance(self, account_id: int) -> int:
        """Rebuild the current balance from the ledger.

        Sets ``current_balance = opening_balance + sum(transactions)``. This is
        the explicit repair tool; nothing calls it automatically.

        Returns:
            The recomputed current balance in cents
        """
        with self.db.transaction():
            account = self._require(account_id)
            balance = account.opening_balance + self.db.sum_account_transactions(account_id)
            self.db.set_account_current_balance(account_id, balance)

        if balance != account.current_balance:
            logger.info(
                "Repaired balance of account %d: %d -> %d",
                account_id,
                account.current_balance,
                balance,
            )
        return balance

    def get_balance_drift(self, account_id: int) -> int:
        """Stored current balance minus the balance the ledger implies.

        Zero means the account is consistent. Nothing is repaired.
        """
        account = self._require(account_id)
        expected = account.opening_balance + self.db.sum_account_transactions(account_id)
        drift = account.current_balance - expected
        if drift:
            logger.warning("Account %d balance drifted by %d cents", account_id, drift)
        return drift
