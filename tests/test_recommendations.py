"""Tests for rule pattern recommendations."""

from datetime import date

from finledger.domain.recommendations import derive_pattern, recommend


def test_derive_pattern_strips_reference_numbers():
    assert derive_pattern("PAYPAL *SPOTIFY 4029357733", None) == "PAYPAL SPOTIFY"


def test_derive_pattern_cuts_at_separator():
    assert derive_pattern(None, "AMAZON MKTP - ORDER 1234") == "AMAZON MKTP"
    assert derive_pattern(None, "SEPA/INCASSO ZIGGO") == "SEPA"


def test_derive_pattern_prefers_merchant():
    assert derive_pattern("Albert Heijn", "POS 1234567 AH 1021") == "Albert Heijn"
    assert derive_pattern("   ", "Bakery #12") == "Bakery 12"


def test_recommend_groups_case_insensitively(make_txn):
    d = date(2024, 3, 1)
    transactions = [
        make_txn(1, -500, d, "Coffee Corner"),
        make_txn(1, -450, d, "COFFEE CORNER"),
        make_txn(1, -700, d, "Coffee Corner"),
        make_txn(1, -2000, d, "Gym"),
    ]

    [rec] = recommend(transactions)

    assert rec.pattern == "Coffee Corner"
    assert rec.count == 3
    assert rec.total_cents == -1650
    assert rec.examples == ("Coffee Corner", "COFFEE CORNER")


def test_recommend_orders_by_count_and_limits(make_txn):
    d = date(2024, 3, 1)
    transactions = [make_txn(1, -100, d, "A")] * 2 + [make_txn(1, -100, d, "B")] * 3
    transactions += [make_txn(1, -100, d, "C")] * 2

    recs = recommend(transactions, limit=2)

    assert [r.pattern for r in recs] == ["B", "A"]
