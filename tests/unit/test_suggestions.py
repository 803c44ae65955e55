"""Unit tests for payment suggestion extraction and cross-location dedup"""

from datetime import datetime, timedelta, timezone
from proximity_gateway.domain.models import (
    DestinationAccount,
    LocationMatch,
    PaymentSuggestion,
    Transaction,
)
from proximity_gateway.domain.suggestions import PaymentSuggestionExtractor, deduplicate_suggestions

NOW = datetime(2024, 3, 1, tzinfo=timezone.utc)


def _txn(txn_id: str, account: DestinationAccount | None, days_ago: int = 0) -> Transaction:
    return Transaction(
        transaction_id=txn_id,
        amount=1000.0,
        status="COMPLETED",
        created_at=NOW - timedelta(days=days_ago),
        to_account=account,
    )


SHOP = DestinationAccount("0011122233", "GTBank", "Kings Store Enterprises")
PHARMACY = DestinationAccount("0099988877", "Zenith", "Bola Pharmacy")
PERSON = DestinationAccount("0044455566", "Access Bank", "Tunde Bello")


def test_repeated_payments_collapse_into_one_suggestion():
    transactions = [_txn(f"t{i}", SHOP, days_ago=i) for i in range(4)]

    suggestions = PaymentSuggestionExtractor().extract(transactions)

    assert len(suggestions) == 1
    assert suggestions[0].frequency == 4
    assert suggestions[0].last_transaction_date == NOW


def test_individual_accounts_never_suggested():
    transactions = [_txn("t1", PERSON), _txn("t2", PERSON), _txn("t3", SHOP)]

    suggestions = PaymentSuggestionExtractor().extract(transactions)

    assert [s.account_number for s in suggestions] == ["0011122233"]


def test_transactions_without_destination_are_skipped():
    suggestions = PaymentSuggestionExtractor().extract([_txn("t1", None), _txn("t2", None)])
    assert suggestions == []


def test_same_account_number_at_different_banks_stays_separate():
    other_bank = DestinationAccount("0011122233", "UBA", "Kings Store Enterprises")

    suggestions = PaymentSuggestionExtractor().extract([_txn("t1", SHOP), _txn("t2", other_bank)])

    assert {s.bank_name for s in suggestions} == {"GTBank", "UBA"}


def test_sorted_by_frequency_then_recency():
    grocer = DestinationAccount("0055566677", "Kuda", "Mama Nkechi Store")
    transactions = [
        _txn("a1", PHARMACY, days_ago=10),
        _txn("b1", SHOP, days_ago=5),
        _txn("b2", SHOP, days_ago=6),
        _txn("c1", grocer, days_ago=1),
    ]

    suggestions = PaymentSuggestionExtractor().extract(transactions)

    # SHOP paid twice; pharmacy and grocer once each, grocer more recently
    assert [s.account_number for s in suggestions] == ["0011122233", "0055566677", "0099988877"]


def test_last_transaction_date_is_most_recent_regardless_of_order():
    transactions = [_txn("t1", SHOP, days_ago=3), _txn("t2", SHOP, days_ago=1), _txn("t3", SHOP, days_ago=7)]

    suggestions = PaymentSuggestionExtractor().extract(transactions)

    assert suggestions[0].last_transaction_date == NOW - timedelta(days=1)


def test_explicit_business_flag_allows_personal_looking_name():
    flagged = DestinationAccount("0012312312", "Opay", "Tunde Bello", is_business=True)
    suggestions = PaymentSuggestionExtractor().extract([_txn("t1", flagged)])
    assert len(suggestions) == 1


def test_ambiguous_policy_off_hides_single_word_names():
    single_word = DestinationAccount("0101010101", "Moniepoint", "Jumia")

    assert PaymentSuggestionExtractor().extract([_txn("t1", single_word)])
    assert PaymentSuggestionExtractor(ambiguous_is_business=False).extract([_txn("t1", single_word)]) == []


def _match(location_id: str, distance: float, accounts: list[str]) -> LocationMatch:
    return LocationMatch(
        location_id=location_id,
        name=location_id,
        address="",
        latitude=0.0,
        longitude=0.0,
        distance=distance,
        confidence=0.8,
        payment_suggestions=[PaymentSuggestion(a, "GTBank", "Shop Ltd", 1, NOW) for a in accounts],
    )


def test_dedup_keeps_account_under_first_match_only():
    matches = [_match("near", 5, ["X", "Y"]), _match("far", 12, ["X", "Z"])]

    result = deduplicate_suggestions(matches)

    assert [m.location_id for m in result] == ["near", "far"]
    assert [s.account_number for s in result[0].payment_suggestions] == ["X", "Y"]
    assert [s.account_number for s in result[1].payment_suggestions] == ["Z"]


def test_dedup_drops_matches_left_empty():
    matches = [_match("near", 5, ["X"]), _match("far", 10, ["X"]), _match("empty", 20, [])]

    result = deduplicate_suggestions(matches)

    assert [m.location_id for m in result] == ["near"]


def test_fused_business_name_is_suggested():
    shoprite = DestinationAccount("0022233344", "GTBank", "SHOPRITE IKEJA")

    suggestions = PaymentSuggestionExtractor().extract([_txn("t1", shoprite)])

    assert [s.account_name for s in suggestions] == ["SHOPRITE IKEJA"]


def test_whole_word_keywords_policy():
    bankole = DestinationAccount("0033344455", "UBA", "Bankole Adeyemi")

    assert PaymentSuggestionExtractor().extract([_txn("t1", bankole)])
    assert PaymentSuggestionExtractor(whole_word_keywords=True).extract([_txn("t1", bankole)]) == []
