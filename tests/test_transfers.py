"""Tests for transfer detection and the mark/unmark workflow."""

from datetime import date, timedelta

import pytest

from finledger.domain.entities import TransferConfidence
from finledger.domain.errors import ConflictError, NotFoundError, ValidationError
from finledger.domain.transfers import find_probable_transfers

JAN_3 = date(2024, 1, 3)


class TestFindProbableTransfers:
    def test_same_day_unambiguous_pair_is_high(self, make_txn):
        out = make_txn(1, -4200, JAN_3, "Transfer to B")
        inc = make_txn(2, 4200, JAN_3, "Transfer from A")

        [pair] = find_probable_transfers([out, inc])

        assert pair.outgoing == out
        assert pair.incoming == inc
        assert pair.confidence == TransferConfidence.HIGH

    def test_date_offset_is_medium(self, make_txn):
        out = make_txn(1, -4200, JAN_3)
        inc = make_txn(2, 4200, JAN_3 + timedelta(days=2))

        [pair] = find_probable_transfers([out, inc])

        assert pair.confidence == TransferConfidence.MEDIUM

    def test_incoming_may_precede_outgoing(self, make_txn):
        out = make_txn(1, -4200, JAN_3)
        inc = make_txn(2, 4200, JAN_3 - timedelta(days=1))
        assert len(find_probable_transfers([out, inc])) == 1

    def test_outside_window_is_ignored(self, make_txn):
        out = make_txn(1, -4200, JAN_3)
        inc = make_txn(2, 4200, JAN_3 + timedelta(days=4))
        assert find_probable_transfers([out, inc]) == []

    @pytest.mark.parametrize(
        "incoming_kwargs",
        [
            {"account_id": 1},
            {"amount_cents": 4201},
            {"currency": "USD"},
            {"is_transfer": True},
        ],
    )
    def test_non_candidates(self, make_txn, incoming_kwargs):
        out = make_txn(1, -4200, JAN_3)
        fields = {"account_id": 2, "amount_cents": 4200}
        fields.update(incoming_kwargs)
        inc = make_txn(fields.pop("account_id"), fields.pop("amount_cents"), JAN_3, **fields)

        assert find_probable_transfers([out, inc]) == []

    def test_competing_candidates_are_medium_and_closest_wins(self, make_txn):
        out = make_txn(1, -5000, JAN_3)
        near = make_txn(2, 5000, JAN_3)
        far = make_txn(3, 5000, JAN_3 + timedelta(days=1))

        [pair] = find_probable_transfers([out, far, near])

        assert pair.incoming == near
        assert pair.confidence == TransferConfidence.MEDIUM

    def test_no_transaction_in_two_pairs(self, make_txn):
        transactions = []
        for day in range(4):
            transactions.append(make_txn(1, -1000, JAN_3 + timedelta(days=day)))
            transactions.append(make_txn(2, 1000, JAN_3 + timedelta(days=day)))
            transactions.append(make_txn(3, 1000, JAN_3 + timedelta(days=day)))

        pairs = find_probable_transfers(transactions)

        ids = [t.id for p in pairs for t in (p.outgoing, p.incoming)]
        assert len(ids) == len(set(ids))
        assert len(pairs) == 4

    def test_greedy_prefers_older_outgoing_on_ties(self, make_txn):
        older = make_txn(1, -700, JAN_3)
        newer = make_txn(1, -700, JAN_3 + timedelta(days=2))
        inc = make_txn(2, 700, JAN_3 + timedelta(days=1))

        [pair] = find_probable_transfers([newer, inc, older])

        assert pair.outgoing == older


class TestTransferService:
    def _pair(self, transaction_service, sample_account, savings_account):
        out = transaction_service.create_transaction(
            account_id=sample_account.id, date=JAN_3, amount_cents=-4200, description="Transfer to savings"
        )
        inc = transaction_service.create_transaction(
            account_id=savings_account.id, date=JAN_3, amount_cents=4200, description="Transfer from checking"
        )
        return out, inc

    def test_find_mark_and_unmark(self, transfer_service, transaction_service, sample_account, savings_account):
        out, inc = self._pair(transaction_service, sample_account, savings_account)

        [pair] = transfer_service.find_probable_transfers()
        assert pair.confidence == TransferConfidence.HIGH

        transfer_service.mark_as_transfer(out.id, inc.id)

        marked_out = transaction_service.get_transaction(out.id)
        marked_in = transaction_service.get_transaction(inc.id)
        assert marked_out.is_transfer and marked_in.is_transfer
        assert marked_out.linked_transaction_id == inc.id
        assert marked_in.linked_transaction_id == out.id
        assert transfer_service.find_probable_transfers() == []

        stats = transfer_service.get_transfer_stats()
        assert stats.marked_transfers == 2
        assert stats.probable_transfers == 0

        transfer_service.unmark_transfer(inc.id)
        assert not transaction_service.get_transaction(out.id).is_transfer
        assert transaction_service.get_transaction(out.id).linked_transaction_id is None
        assert transfer_service.get_transfer_stats().probable_transfers == 1

    def test_marking_keeps_balances(self, transfer_service, transaction_service, account_service, sample_account, savings_account):
        out, inc = self._pair(transaction_service, sample_account, savings_account)
        transfer_service.mark_as_transfer(out.id, inc.id)

        assert account_service.get_account(sample_account.id).current_balance == 100000 - 4200
        assert account_service.get_account(savings_account.id).current_balance == 4200

    def test_mark_validation(self, transfer_service, transaction_service, sample_account, savings_account):
        out, inc = self._pair(transaction_service, sample_account, savings_account)

        with pytest.raises(ValidationError):
            transfer_service.mark_as_transfer(out.id, out.id)
        with pytest.raises(ValidationError):
            transfer_service.mark_as_transfer(inc.id, out.id)
        with pytest.raises(NotFoundError):
            transfer_service.mark_as_transfer(out.id, 999)

    def test_mark_conflict(self, transfer_service, transaction_service, sample_account, savings_account):
        out, inc = self._pair(transaction_service, sample_account, savings_account)
        other = transaction_service.create_transaction(
            account_id=savings_account.id, date=JAN_3, amount_cents=4200, description="Another"
        )
        transfer_service.mark_as_transfer(out.id, inc.id)

        with pytest.raises(ConflictError):
            transfer_service.mark_as_transfer(out.id, other.id)

    def test_deleting_one_leg_unlinks_partner(self, transfer_service, transaction_service, sample_account, savings_account):
        out, inc = self._pair(transaction_service, sample_account, savings_account)
        transfer_service.mark_as_transfer(out.id, inc.id)

        transaction_service.delete_transaction(out.id)

        partner = transaction_service.get_transaction(inc.id)
        assert partner.linked_transaction_id is None
        assert partner.is_transfer is False
