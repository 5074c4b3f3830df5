"""Domain model entities for finledger.

These are pure data classes representing business concepts, independent of
database schema. Money is always held as integer minor units (cents).
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from enum import Enum
from typing import Optional


class AccountType(str, Enum):
    """Supported account types."""

    CHECKING = "checking"
    SAVINGS = "savings"
    INVESTMENT = "investment"
    CREDIT_CARD = "credit_card"
    CASH = "cash"
    MORTGAGE = "mortgage"
    LOAN = "loan"


ASSET_ACCOUNT_TYPES = frozenset(
    {AccountType.CHECKING, AccountType.SAVINGS, AccountType.INVESTMENT, AccountType.CASH}
)
LIABILITY_ACCOUNT_TYPES = frozenset(
    {AccountType.CREDIT_CARD, AccountType.LOAN, AccountType.MORTGAGE}
)


class MatchType(str, Enum):
    """How a category rule pattern is compared to transaction text."""

    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    EXACT = "exact"
    REGEX = "regex"


class Frequency(str, Enum):
    """Recurrence frequency of a recurring rule."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class TransferConfidence(str, Enum):
    """Confidence level of a probable transfer pair."""

    HIGH = "high"
    MEDIUM = "medium"


@dataclass(frozen=True)
class Account:
    """Account domain entity.

    ``current_balance`` equals ``opening_balance`` plus the sum of the
    account's transaction amounts.
    """

    id: int
    name: str
    type: AccountType
    currency: str
    opening_balance: int
    current_balance: int
    created_at: datetime
    institution: Optional[str] = None
    is_active: bool = True
    linked_to_account_id: Optional[int] = None
    hide_from_dashboard: bool = False


@dataclass(frozen=True)
class Category:
    """Category domain entity."""

    id: int
    name: str
    is_income: bool = False
    icon: Optional[str] = None
    color: Optional[str] = None
    parent_id: Optional[int] = None


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    ``amount_cents`` is signed: positive for income, negative for expenses.
    """

    id: int
    account_id: int
    date: date
    amount_cents: int
    currency: str
    description: str
    category_id: Optional[int] = None
    merchant: Optional[str] = None
    notes: Optional[str] = None
    external_id: Optional[str] = None
    import_batch_id: Optional[int] = None
    is_transfer: bool = False
    linked_transaction_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class CategoryRule:
    """Pattern rule assigning a category to matching transactions."""

    id: int
    category_id: int
    pattern: str
    match_type: MatchType = MatchType.CONTAINS
    case_sensitive: bool = False
    priority: int = 0
    is_active: bool = True


@dataclass(frozen=True)
class RecurringRule:
    """Recurring charge (subscription) domain entity."""

    id: int
    account_id: int
    name: str
    amount_cents: int
    frequency: Frequency
    start_date: date
    next_date: date
    category_id: Optional[int] = None
    day_of_month: Optional[int] = None
    end_date: Optional[date] = None
    is_active: bool = True


@dataclass(frozen=True)
class ImportBatch:
    """A single CSV import, kept so the whole import can be undone."""

    id: int
    filename: Optional[str]
    transaction_count: int
    total_amount_cents: int
    imported_at: datetime
    account_id: Optional[int] = None
    preserve_balance: bool = False


@dataclass(frozen=True)
class ImportRow:
    """Validated inbound row for a deduplicating import."""

    account_id: int
    date: date
    amount_cents: int
    description: str
    merchant: Optional[str] = None
    currency: str = "EUR"
    external_id: Optional[str] = None


@dataclass(frozen=True)
class ImportResult:
    """Outcome of a deduplicating import."""

    imported: int
    skipped: int
    batch_id: Optional[int]


@dataclass(frozen=True)
class CategorizationResult:
    """Outcome of a bulk rule application."""

    categorized: int
    total: int


@dataclass(frozen=True)
class Recommendation:
    """Suggested rule pattern mined from uncategorized transactions."""

    pattern: str
    count: int
    total_cents: int
    examples: tuple[str, ...] = ()


@dataclass(frozen=True)
class SubscriptionSuggestion:
    """Recurring charge inferred from transaction history."""

    merchant: str
    avg_amount: int
    frequency: Frequency
    confidence: float
    occurrences: int
    account_id: int
    last_date: Optional[date] = None


@dataclass(frozen=True)
class TransferPair:
    """Probable transfer between two accounts."""

    outgoing: Transaction
    incoming: Transaction
    confidence: TransferConfidence


@dataclass(frozen=True)
class TransferStats:
    """Counts shown by the transfer scanner."""

    marked_transfers: int
    probable_transfers: int


@dataclass(frozen=True)
class CategoryBreakdownItem:
    """Expense total for one category over a period."""

    category_id: Optional[int]
    name: str
    total_cents: int
    color: Optional[str] = None


@dataclass(frozen=True)
class DashboardStats:
    """Headline figures for a month."""

    net_worth: int
    total_assets: int
    total_liabilities: int
    monthly_income: int
    monthly_expenses: int
    savings_rate: float
    accounts: tuple[Account, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class MonthlyTotals:
    """Income and expenses (both positive) for the month starting at ``month``."""

    month: date
    income: int
    expenses: int


@dataclass(frozen=True)
class AmortizationRow:
    """One month of a mortgage amortization schedule."""

    month: int
    date: date
    payment: int
    principal: int
    interest: int
    balance: int
    total_interest: int
    total_principal: int


@dataclass(frozen=True)
class MortgageCalculation:
    """Mortgage payment summary with its full schedule."""

    monthly_payment: int
    total_payment: int
    total_interest: int
    schedule: tuple[AmortizationRow, ...]
