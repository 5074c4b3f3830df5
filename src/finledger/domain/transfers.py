"""Probable transfer detection and the confirm/ignore workflow."""

import logging
from collections import Counter, defaultdict
from typing import Iterable

from finledger.database.base import Database
from finledger.domain.entities import Transaction, TransferConfidence, TransferPair, TransferStats
from finledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    transaction_not_found,
)

logger = logging.getLogger(__name__)

# Maximum distance in days between the two legs of a transfer
MAX_DAY_GAP = 3


def _candidate_pairs(transactions: Iterable[Transaction]) -> list[tuple[int, Transaction, Transaction]]:
    """All (day_gap, outgoing, incoming) combinations that could be one transfer."""
    outgoing: list[Transaction] = []
    incoming: dict[tuple[str, int], list[Transaction]] = defaultdict(list)
    for txn in transactions:
        if txn.is_transfer:
            continue
        if txn.amount_cents < 0:
            outgoing.append(txn)
        elif txn.amount_cents > 0:
            incoming[(txn.currency, txn.amount_cents)].append(txn)

    candidates = []
    for out in outgoing:
        # Amounts must match exactly in the same currency; no conversion
        for inc in incoming.get((out.currency, -out.amount_cents), ()):
            if inc.account_id == out.account_id:
                continue
            gap = abs((inc.date - out.date).days)
            if gap <= MAX_DAY_GAP:
                candidates.append((gap, out, inc))
    return candidates


def find_probable_transfers(transactions: Iterable[Transaction]) -> list[TransferPair]:
    """Pair outgoing and incoming transactions that look like one transfer.

    Pairs are assigned greedily, closest dates first, and a transaction is
    never used in more than one pair. A pair is ``high`` confidence only when
    both legs share a date and neither leg had any other candidate.
    """
    candidates = _candidate_pairs(transactions)

    options: Counter[int] = Counter()
    for _, out, inc in candidates:
        options[out.id] += 1
        options[inc.id] += 1

    candidates.sort(key=lambda c: (c[0], c[1].date, c[1].id, c[2].id))

    used: set[int] = set()
    pairs = []
    for gap, out, inc in candidates:
        if out.id in used or inc.id in used:
            continue
        used.update((out.id, inc.id))
        unambiguous = options[out.id] == 1 and options[inc.id] == 1
        confidence = (
            TransferConfidence.HIGH if gap == 0 and unambiguous else TransferConfidence.MEDIUM
        )
        pairs.append(TransferPair(outgoing=out, incoming=inc, confidence=confidence))

    logger.debug("Found %d probable transfers among %d candidates", len(pairs), len(candidates))
    return pairs


class TransferService:
    """Service for finding and confirming transfers between accounts."""

    def __init__(self, db: Database):
        """Initialize transfer service.

        Args:
            db: Database instance
        """
        self.db = db

    def find_probable_transfers(self) -> list[TransferPair]:
        """Scan the whole ledger for unconfirmed transfer pairs."""
        return find_probable_transfers(self.db.list_transactions())

    def _require(self, transaction_id: int) -> Transaction:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def mark_as_transfer(self, outgoing_id: int, incoming_id: int) -> None:
        """Flag two transactions as the two legs of one transfer.

        Raises:
            NotFoundError: If either transaction doesn't exist
            ValidationError: If the pair can't be a transfer
            ConflictError: If either leg is already linked to another transaction
        """
        if outgoing_id == incoming_id:
            raise ValidationError("A transaction cannot be a transfer to itself")
        outgoing = self._require(outgoing_id)
        incoming = self._require(incoming_id)

        if outgoing.account_id == incoming.account_id:
            raise ValidationError("Transfer legs must be on different accounts")
        if not (outgoing.amount_cents < 0 < incoming.amount_cents):
            raise ValidationError("Outgoing leg must be negative and incoming leg positive")

        for txn, partner_id in ((outgoing, incoming_id), (incoming, outgoing_id)):
            if txn.linked_transaction_id is not None and txn.linked_transaction_id != partner_id:
                raise ConflictError(
                    f"Transaction {txn.id} is already linked to transaction {txn.linked_transaction_id}"
                )

        with self.db.transaction():
            self.db.link_transfer(outgoing_id, incoming_id)
        logger.info("Marked transactions %d and %d as a transfer", outgoing_id, incoming_id)

    def unmark_transfer(self, transaction_id: int) -> None:
        """Clear the transfer flag and link on a transaction and its partner."""
        self._require(transaction_id)
        with self.db.transaction():
            self.db.unlink_transfer(transaction_id)
        logger.info("Unmarked transfer on transaction %d", transaction_id)

    def get_transfer_stats(self) -> TransferStats:
        """Count confirmed transfer transactions and pending probable pairs."""
        return TransferStats(
            marked_transfers=self.db.count_transactions(transfers_only=True),
            probable_transfers=len(self.find_probable_transfers()),
        )
