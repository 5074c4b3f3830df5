"""Rule pattern recommendations mined from uncategorized transactions."""

import re
from typing import Iterable, Optional

from finledger.domain.entities import Recommendation, Transaction

MIN_OCCURRENCES = 2
MAX_RECOMMENDATIONS = 20
MAX_EXAMPLES = 3

_LONG_DIGIT_RUN = re.compile(r"\d{4,}")
_NOISE_CHARS = re.compile(r"[*#]")
_WHITESPACE = re.compile(r"\s+")
_SEPARATOR = re.compile(r"[-/]")


def derive_pattern(merchant: Optional[str], description: Optional[str]) -> str:
    """Reduce a merchant (preferred) or description to a reusable pattern.

    Card numbers and reference codes (runs of 4+ digits) and ``*``/``#``
    are removed, whitespace is collapsed, and only the part before the
    first ``-`` or ``/`` is kept.

    >>> derive_pattern("PAYPAL *SPOTIFY 4029357733", None)
    'PAYPAL SPOTIFY'
    >>> derive_pattern(None, "AMAZON MKTP - ORDER 1234")
    'AMAZON MKTP'
    """
    source = merchant if merchant and merchant.strip() else description or ""
    text = _LONG_DIGIT_RUN.sub("", source)
    text = _NOISE_CHARS.sub("", text)
    text = _WHITESPACE.sub(" ", text)
    return _SEPARATOR.split(text, maxsplit=1)[0].strip()


def recommend(
    transactions: Iterable[Transaction], limit: int = MAX_RECOMMENDATIONS
) -> list[Recommendation]:
    """Group transactions by derived pattern and return the most frequent.

    Groups seen fewer than twice are dropped. Ties in count keep the order
    in which the pattern was first seen.
    """
    groups: dict[str, dict] = {}
    for txn in transactions:
        pattern = derive_pattern(txn.merchant, txn.description)
        if not pattern:
            continue
        key = pattern.casefold()
        group = groups.setdefault(key, {"pattern": pattern, "count": 0, "total": 0, "examples": []})
        group["count"] += 1
        group["total"] += txn.amount_cents
        if len(group["examples"]) < MAX_EXAMPLES and txn.description not in group["examples"]:
            group["examples"].append(txn.description)

    qualified = [g for g in groups.values() if g["count"] >= MIN_OCCURRENCES]
    qualified.sort(key=lambda g: -g["count"])
    return [
        Recommendation(
            pattern=g["pattern"],
            count=g["count"],
            total_cents=g["total"],
            examples=tuple(g["examples"]),
        )
        for g in qualified[:limit]
    ]
