"""Mapper functions to convert SQLAlchemy models into domain entities.

Enum-valued columns are stored as plain strings and converted here, so the
rest of the application only ever sees the enum types.
"""

from finledger.domain import entities as domain
from finledger.database.models import (
    Account as ORMAccount,
    Category as ORMCategory,
    Transaction as ORMTransaction,
    CategoryRule as ORMCategoryRule,
    RecurringRule as ORMRecurringRule,
    ImportBatch as ORMImportBatch,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        type=domain.AccountType(orm_account.type),
        currency=orm_account.currency,
        opening_balance=orm_account.opening_balance,
        current_balance=orm_account.current_balance,
        created_at=orm_account.created_at,
        institution=orm_account.institution,
        is_active=orm_account.is_active,
        linked_to_account_id=orm_account.linked_to_account_id,
        hide_from_dashboard=orm_account.hide_from_dashboard,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        is_income=orm_category.is_income,
        icon=orm_category.icon,
        color=orm_category.color,
        parent_id=orm_category.parent_id,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        account_id=orm_transaction.account_id,
        date=orm_transaction.date,
        amount_cents=orm_transaction.amount_cents,
        currency=orm_transaction.currency,
        description=orm_transaction.description,
        category_id=orm_transaction.category_id,
        merchant=orm_transaction.merchant,
        notes=orm_transaction.notes,
        external_id=orm_transaction.external_id,
        import_batch_id=orm_transaction.import_batch_id,
        is_transfer=orm_transaction.is_transfer,
        linked_transaction_id=orm_transaction.linked_transaction_id,
        created_at=orm_transaction.created_at,
    )


def category_rule_to_domain(orm_rule: ORMCategoryRule) -> domain.CategoryRule:
    """Convert SQLAlchemy CategoryRule model to domain CategoryRule entity."""
    return domain.CategoryRule(
        id=orm_rule.id,
        category_id=orm_rule.category_id,
        pattern=orm_rule.pattern,
        match_type=domain.MatchType(orm_rule.match_type),
        case_sensitive=orm_rule.case_sensitive,
        priority=orm_rule.priority,
        is_active=orm_rule.is_active,
    )


def recurring_rule_to_domain(orm_rule: ORMRecurringRule) -> domain.RecurringRule:
    """Convert SQLAlchemy RecurringRule model to domain RecurringRule entity."""
    return domain.RecurringRule(
        id=orm_rule.id,
        account_id=orm_rule.account_id,
        name=orm_rule.name,
        amount_cents=orm_rule.amount_cents,
        frequency=domain.Frequency(orm_rule.frequency),
        start_date=orm_rule.start_date,
        next_date=orm_rule.next_date,
        category_id=orm_rule.category_id,
        day_of_month=orm_rule.day_of_month,
        end_date=orm_rule.end_date,
        is_active=orm_rule.is_active,
    )


def import_batch_to_domain(orm_batch: ORMImportBatch) -> domain.ImportBatch:
    """Convert SQLAlchemy ImportBatch model to domain ImportBatch entity."""
    return domain.ImportBatch(
        id=orm_batch.id,
        filename=orm_batch.filename,
        transaction_count=orm_batch.transaction_count,
        total_amount_cents=orm_batch.total_amount_cents,
        imported_at=orm_batch.imported_at,
        account_id=orm_batch.account_id,
        preserve_balance=orm_batch.preserve_balance,
    )
