"""Unit tests for notification content and name shortening"""

from datetime import datetime, timezone
from proximity_gateway.domain.models import PaymentSuggestion, ProximityResult
from proximity_gateway.domain.notifications import build_location_notification
from proximity_gateway.utils.text_utils import normalize_name, truncate_at_word_boundary


def test_normalize_name():
    assert normalize_name("Kings' Store,  Ikeja") == "Kings Store Ikeja"
    assert normalize_name("  Mama-Put  ") == "MamaPut"


def test_short_text_unchanged():
    assert truncate_at_word_boundary("Kings Store", 20) == "Kings Store"


def test_truncates_at_word_boundary():
    assert truncate_at_word_boundary("Shoprite Ikeja City Mall", 20) == "Shoprite Ikeja City"


def test_single_long_word_is_hard_cut():
    result = truncate_at_word_boundary("Supercalifragilisticexpialidocious", 20)

    assert result == "Supercalifragilis..."
    assert len(result) == 20


def test_notification_payload():
    result = ProximityResult(
        is_nearby=True,
        location_name="Kings Store",
        distance=12.5,
        location_address="12 Allen Avenue, Ikeja",
        location_id="loc_kings",
        payment_suggestions=[
            PaymentSuggestion(
                "0011122233", "GTBank", "Kings Store Enterprises", 3, datetime(2024, 3, 1, tzinfo=timezone.utc)
            )
        ],
    )

    notification = build_location_notification(result)

    assert notification.title == "Back at Kings Store? 👀"
    assert notification.body == "Account details available, Tap to pay now"
    assert notification.priority == "high"
    assert notification.data == {
        "type": "location",
        "locationId": "loc_kings",
        "locationName": "Kings Store",
        "locationAddress": "12 Allen Avenue, Ikeja",
        "distance": 12.5,
        "paymentSuggestions": [
            {
                "accountNumber": "0011122233",
                "bankName": "GTBank",
                "accountName": "Kings Store Enterprises",
                "frequency": 3,
                "lastTransactionDate": "2024-03-01T00:00:00+00:00",
            }
        ],
    }


def test_missing_location_name():
    notification = build_location_notification(ProximityResult(is_nearby=True, location_id="loc_x"))
    assert notification.title == "Back at Unknown Location? 👀"


def test_first_word_of_exactly_max_length_is_hard_cut():
    # 20 characters: measured with its separator it is 21, so it does not fit
    assert truncate_at_word_boundary("Shopriteikejacitymal Lagos", 20) == "Shopriteikejacity..."


def test_first_word_one_short_of_max_length_is_kept():
    assert truncate_at_word_boundary("Shopriteikejacityma Lagos", 20) == "Shopriteikejacityma"
