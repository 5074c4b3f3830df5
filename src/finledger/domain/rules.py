"""Categorization rule engine and category rule service.

Rules are evaluated in descending priority order and the first match wins.
Rules sharing a priority keep the order they were given in, which for rules
loaded from the database is creation order.
"""

import logging
import re
from functools import lru_cache
from typing import Any, Iterable, Optional, Pattern

from finledger.database.base import Database
from finledger.domain.entities import (
    CategorizationResult,
    CategoryRule,
    MatchType,
    Recommendation,
)
from finledger.domain.errors import (
    NotFoundError,
    ValidationError,
    category_not_found,
    invalid_choice,
    rule_not_found,
)
from finledger.domain.recommendations import recommend

logger = logging.getLogger(__name__)


def build_match_text(description: Optional[str], merchant: Optional[str] = None) -> str:
    """Join description and merchant with a single space, then trim."""
    return f"{description or ''} {merchant or ''}".strip()


@lru_cache(maxsize=1024)
def _compile(pattern: str, case_sensitive: bool) -> Optional[Pattern[str]]:
    flags = 0 if case_sensitive else re.IGNORECASE
    try:
        return re.compile(pattern, flags)
    except re.error as exc:
        # Cached, so each bad pattern is reported once per process
        logger.warning("Ignoring malformed regex pattern %r: %s", pattern, exc)
        return None


def try_match(rule: CategoryRule, text: str) -> bool:
    """Return True if the rule's pattern matches text.

    Regex patterns run against the original text; the other match types
    compare case-folded strings unless the rule is case sensitive. A regex
    that does not compile never matches.
    """
    if rule.match_type == MatchType.REGEX:
        compiled = _compile(rule.pattern, rule.case_sensitive)
        return compiled is not None and compiled.search(text) is not None

    haystack, needle = text, rule.pattern
    if not rule.case_sensitive:
        haystack, needle = haystack.casefold(), needle.casefold()

    if rule.match_type == MatchType.EXACT:
        return haystack == needle
    if rule.match_type == MatchType.STARTS_WITH:
        return haystack.startswith(needle)
    return needle in haystack


def order_rules(rules: Iterable[CategoryRule]) -> list[CategoryRule]:
    """Active rules by descending priority; sort is stable for ties."""
    return sorted((r for r in rules if r.is_active), key=lambda r: -r.priority)


def match_category(text: str, rules: Iterable[CategoryRule]) -> Optional[int]:
    """Return the category ID of the first matching rule, or None."""
    for rule in order_rules(rules):
        if try_match(rule, text):
            return rule.category_id
    return None


def parse_match_type(value: Any) -> MatchType:
    """Coerce a string or MatchType into MatchType."""
    try:
        return MatchType(value)
    except ValueError:
        raise ValidationError(invalid_choice("match type", value, MatchType)) from None


class CategoryRuleService:
    """Service for managing category rules and applying them."""

    def __init__(self, db: Database):
        """Initialize category rule service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_category(self, category_id: int) -> None:
        if self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

    def create_rule(
        self,
        pattern: str,
        category_id: int,
        match_type: MatchType | str = MatchType.CONTAINS,
        case_sensitive: bool = False,
        priority: int = 0,
    ) -> CategoryRule:
        """Create a category rule.

        A regex pattern that does not compile is stored anyway; it simply
        never matches.

        Raises:
            ValidationError: If the pattern is empty or match type unknown
            NotFoundError: If the category doesn't exist
        """
        pattern = (pattern or "").strip()
        if not pattern:
            raise ValidationError("Rule pattern cannot be empty")
        match_type = parse_match_type(match_type)
        if not isinstance(priority, int):
            raise ValidationError("Rule priority must be an integer")
        self._require_category(category_id)

        if match_type == MatchType.REGEX:
            _compile(pattern, case_sensitive)

        rule_id = self.db.create_category_rule(
            category_id=category_id,
            pattern=pattern,
            match_type=match_type.value,
            case_sensitive=case_sensitive,
            priority=priority,
        )
        return self.db.get_category_rule(rule_id)

    def get_rule(self, rule_id: int) -> Optional[CategoryRule]:
        """Get category rule by ID."""
        return self.db.get_category_rule(rule_id)

    def list_rules(self, active_only: bool = False) -> list[CategoryRule]:
        """List rules in evaluation order."""
        return self.db.list_category_rules(active_only=active_only)

    def update_rule(self, rule_id: int, **changes: Any) -> CategoryRule:
        """Update pattern, match_type, case_sensitive, priority, category_id or is_active.

        Raises:
            NotFoundError: If the rule or new category doesn't exist
            ValidationError: If a field value is invalid
        """
        if self.db.get_category_rule(rule_id) is None:
            raise NotFoundError(rule_not_found(rule_id))

        if "pattern" in changes:
            changes["pattern"] = (changes["pattern"] or "").strip()
            if not changes["pattern"]:
                raise ValidationError("Rule pattern cannot be empty")
        if "match_type" in changes:
            changes["match_type"] = parse_match_type(changes["match_type"]).value
        if "category_id" in changes:
            self._require_category(changes["category_id"])

        self.db.update_category_rule(rule_id, **changes)
        return self.db.get_category_rule(rule_id)

    def delete_rule(self, rule_id: int) -> None:
        """Delete a category rule."""
        if self.db.get_category_rule(rule_id) is None:
            raise NotFoundError(rule_not_found(rule_id))
        self.db.delete_category_rule(rule_id)

    def find_category_for_transaction(
        self, description: Optional[str], merchant: Optional[str] = None
    ) -> Optional[int]:
        """Return the category the active rules assign to this text, if any."""
        text = build_match_text(description, merchant)
        return match_category(text, self.db.list_category_rules(active_only=True))

    def apply_rules(self) -> CategorizationResult:
        """Categorize every uncategorized transaction that a rule matches.

        Already categorized transactions are never touched, so running this
        twice in a row categorizes nothing the second time.
        """
        uncategorized = self.db.list_transactions(uncategorized=True)
        rules = order_rules(self.db.list_category_rules(active_only=True))

        assignments: dict[int, Optional[int]] = {}
        if rules:
            for txn in uncategorized:
                category_id = match_category(build_match_text(txn.description, txn.merchant), rules)
                if category_id is not None:
                    assignments[txn.id] = category_id

        with self.db.transaction():
            self.db.set_transaction_categories(assignments)

        logger.info(
            "Applied %d rules: categorized %d of %d transactions",
            len(rules),
            len(assignments),
            len(uncategorized),
        )
        return CategorizationResult(categorized=len(assignments), total=len(uncategorized))

    def get_recommendations(self, limit: int = 20) -> list[Recommendation]:
        """Suggest rule patterns from uncategorized transactions."""
        return recommend(self.db.list_transactions(uncategorized=True), limit=limit)
