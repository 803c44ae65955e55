"""Location notification content"""

from proximity_gateway.domain.models import LocationNotification, ProximityResult
from proximity_gateway.utils.text_utils import truncate_at_word_boundary

NOTIFICATION_BODY = "Account details available, Tap to pay now"


def build_location_notification(result: ProximityResult, max_name_length: int = 20) -> LocationNotification:
    """
    Build the "Back at {place}?" push for a nearby result.

    The place name is shortened to max_name_length so the title fits on a
    lock screen.
    """
    location_name = result.location_name or "Unknown Location"
    short_name = truncate_at_word_boundary(location_name, max_name_length)

    return LocationNotification(
        title=f"Back at {short_name}? 👀",
        body=NOTIFICATION_BODY,
        data={
            "type": "location",
            "locationId": result.location_id,
            "locationName": result.location_name,
            "locationAddress": result.location_address,
            "distance": result.distance,
            "paymentSuggestions": [
                {
                    "accountNumber": s.account_number,
                    "bankName": s.bank_name,
                    "accountName": s.account_name,
                    "frequency": s.frequency,
                    "lastTransactionDate": s.last_transaction_date.isoformat(),
                }
                for s in result.payment_suggestions
            ],
        },
    )
