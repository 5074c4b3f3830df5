"""Recurring-charge (subscription) detection.

Transactions are grouped per account by a normalized merchant key. A group
becomes a suggestion when it has at least ``MIN_OCCURRENCES`` charges, the
median gap between consecutive charges falls inside one of the frequency
bands below, and the gaps are regular enough (coefficient of variation no
larger than ``MAX_GAP_CV``).

Frequency bands (median gap in days):

    weekly    7.00 +/- 3
    monthly  30.44 +/- 5
    yearly  365.25 +/- 15
"""

import logging
import statistics
from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from finledger.database.base import Database
from finledger.domain.entities import Frequency, SubscriptionSuggestion, Transaction
from finledger.domain.recommendations import derive_pattern

logger = logging.getLogger(__name__)

MIN_OCCURRENCES = 3
MAX_GAP_CV = 0.25
# Occurrence count at which the volume part of the confidence saturates
FULL_VOLUME_OCCURRENCES = 6
REGULARITY_WEIGHT = 0.6
VOLUME_WEIGHT = 0.4

FREQUENCY_BANDS: tuple[tuple[Frequency, float, float], ...] = (
    (Frequency.WEEKLY, 7.0, 3.0),
    (Frequency.MONTHLY, 30.44, 5.0),
    (Frequency.YEARLY, 365.25, 15.0),
)


def merchant_key(merchant: Optional[str], description: Optional[str]) -> str:
    """Case-folded grouping key for a merchant or description."""
    return derive_pattern(merchant, description).casefold()


def classify_gap(median_gap: float) -> Optional[Frequency]:
    """Map a median gap in days to a frequency, or None if no band fits."""
    for frequency, center, tolerance in FREQUENCY_BANDS:
        if abs(median_gap - center) <= tolerance:
            return frequency
    return None


def gap_variation(gaps: list[int]) -> float:
    """Coefficient of variation of the gaps (population stdev over mean)."""
    mean = statistics.fmean(gaps)
    if mean <= 0:
        return float("inf")
    return statistics.pstdev(gaps) / mean


def subscription_confidence(variation: float, occurrences: int) -> float:
    """Score in [0, 1]; higher for regular gaps and more occurrences."""
    regularity = max(0.0, 1.0 - variation / MAX_GAP_CV)
    volume = min(1.0, occurrences / FULL_VOLUME_OCCURRENCES)
    return round(REGULARITY_WEIGHT * regularity + VOLUME_WEIGHT * volume, 3)


def _mean_abs_cents(amounts: list[int]) -> int:
    mean = Decimal(sum(abs(a) for a in amounts)) / len(amounts)
    return int(mean.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def detect_subscriptions(transactions: Iterable[Transaction]) -> list[SubscriptionSuggestion]:
    """Infer recurring charges from transaction history.

    Only expenses that are not flagged as transfers are considered. Results
    are ordered by confidence, then occurrence count, highest first.
    """
    groups: dict[tuple[int, str], list[Transaction]] = defaultdict(list)
    for txn in transactions:
        if txn.amount_cents >= 0 or txn.is_transfer:
            continue
        key = merchant_key(txn.merchant, txn.description)
        if key:
            groups[(txn.account_id, key)].append(txn)

    suggestions = []
    for (account_id, key), txns in groups.items():
        if len(txns) < MIN_OCCURRENCES:
            continue
        txns.sort(key=lambda t: (t.date, t.id))
        gaps = [(later.date - earlier.date).days for earlier, later in zip(txns, txns[1:])]

        frequency = classify_gap(statistics.median(gaps))
        if frequency is None:
            continue
        variation = gap_variation(gaps)
        if variation > MAX_GAP_CV:
            logger.debug("Skipping irregular group %r (cv=%.3f)", key, variation)
            continue

        latest = txns[-1]
        suggestions.append(
            SubscriptionSuggestion(
                merchant=derive_pattern(latest.merchant, latest.description),
                avg_amount=_mean_abs_cents([t.amount_cents for t in txns]),
                frequency=frequency,
                confidence=subscription_confidence(variation, len(txns)),
                occurrences=len(txns),
                account_id=account_id,
                last_date=latest.date,
            )
        )

    suggestions.sort(key=lambda s: (-s.confidence, -s.occurrences, s.merchant))
    logger.debug("Detected %d subscription candidates from %d groups", len(suggestions), len(groups))
    return suggestions


class SubscriptionService:
    """Service exposing subscription detection over the ledger."""

    def __init__(self, db: Database):
        """Initialize subscription service.

        Args:
            db: Database instance
        """
        self.db = db

    def detect_subscriptions(self, include_existing: bool = False) -> list[SubscriptionSuggestion]:
        """Detect recurring charges across all transactions.

        Args:
            include_existing: If False, drop suggestions already covered by an
                active recurring rule with the same normalized name on the
                same account

        Returns:
            List of suggestions, most confident first
        """
        suggestions = detect_subscriptions(self.db.list_transactions())
        if include_existing:
            return suggestions

        existing = {
            (rule.account_id, merchant_key(None, rule.name))
            for rule in self.db.list_recurring_rules(active_only=True)
        }
        return [
            s for s in suggestions if (s.account_id, merchant_key(None, s.merchant)) not in existing
        ]
