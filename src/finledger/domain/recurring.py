"""Recurring rule (subscription) domain service."""

from datetime import date
from typing import Any, Optional

from finledger.database.base import Database
from finledger.domain.entities import Frequency, RecurringRule, SubscriptionSuggestion
from finledger.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    category_not_found,
    invalid_choice,
    recurring_rule_not_found,
)


def parse_frequency(value: Any) -> Frequency:
    """Coerce a string or Frequency into Frequency."""
    try:
        return Frequency(value)
    except ValueError:
        raise ValidationError(invalid_choice("frequency", value, Frequency)) from None


class RecurringRuleService:
    """Service for managing recurring rules."""

    def __init__(self, db: Database):
        """Initialize recurring rule service.

        Args:
            db: Database instance
        """
        self.db = db

    def _validate(
        self,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
        day_of_month: Optional[int] = None,
        amount_cents: Optional[int] = None,
    ) -> None:
        if account_id is not None and self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        if category_id is not None and self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))
        if day_of_month is not None and not 1 <= day_of_month <= 31:
            raise ValidationError("day_of_month must be between 1 and 31")
        if amount_cents is not None and (not isinstance(amount_cents, int) or amount_cents == 0):
            raise ValidationError("Recurring amount must be a non-zero integer number of cents")

    def create_rule(
        self,
        account_id: int,
        name: str,
        amount_cents: int,
        frequency: Frequency | str,
        start_date: date,
        category_id: Optional[int] = None,
        day_of_month: Optional[int] = None,
        end_date: Optional[date] = None,
    ) -> RecurringRule:
        """Create a recurring rule; its first due date is the start date.

        Raises:
            ValidationError: If a field is invalid
            NotFoundError: If the account or category doesn't exist
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Recurring rule name cannot be empty")
        frequency = parse_frequency(frequency)
        if end_date is not None and end_date < start_date:
            raise ValidationError("end_date cannot be before start_date")
        self._validate(account_id, category_id, day_of_month, amount_cents)

        rule_id = self.db.create_recurring_rule(
            account_id=account_id,
            name=name,
            amount_cents=amount_cents,
            frequency=frequency.value,
            start_date=start_date,
            next_date=start_date,
            category_id=category_id,
            day_of_month=day_of_month,
            end_date=end_date,
        )
        return self.db.get_recurring_rule(rule_id)

    def create_from_suggestion(
        self,
        suggestion: SubscriptionSuggestion,
        start_date: date,
        category_id: Optional[int] = None,
        name: Optional[str] = None,
    ) -> RecurringRule:
        """Accept a detected subscription as a recurring rule."""
        return self.create_rule(
            account_id=suggestion.account_id,
            name=name or suggestion.merchant,
            amount_cents=-abs(suggestion.avg_amount),
            frequency=suggestion.frequency,
            start_date=start_date,
            category_id=category_id,
            day_of_month=start_date.day if suggestion.frequency == Frequency.MONTHLY else None,
        )

    def get_rule(self, rule_id: int) -> Optional[RecurringRule]:
        """Get recurring rule by ID."""
        return self.db.get_recurring_rule(rule_id)

    def list_rules(self, active_only: bool = True) -> list[RecurringRule]:
        """List recurring rules by next due date."""
        return self.db.list_recurring_rules(active_only=active_only)

    def update_rule(self, rule_id: int, **changes: Any) -> RecurringRule:
        """Update recurring rule fields."""
        if self.db.get_recurring_rule(rule_id) is None:
            raise NotFoundError(recurring_rule_not_found(rule_id))
        if "frequency" in changes:
            changes["frequency"] = parse_frequency(changes["frequency"]).value
        if "name" in changes:
            changes["name"] = (changes["name"] or "").strip()
            if not changes["name"]:
                raise ValidationError("Recurring rule name cannot be empty")
        self._validate(
            account_id=changes.get("account_id"),
            category_id=changes.get("category_id"),
            day_of_month=changes.get("day_of_month"),
            amount_cents=changes.get("amount_cents"),
        )
        self.db.update_recurring_rule(rule_id, **changes)
        return self.db.get_recurring_rule(rule_id)

    def deactivate_rule(self, rule_id: int) -> None:
        """Soft-delete a recurring rule."""
        if self.db.get_recurring_rule(rule_id) is None:
            raise NotFoundError(recurring_rule_not_found(rule_id))
        self.db.update_recurring_rule(rule_id, is_active=False)
