"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class LocationType(str, Enum):
    STORE = "STORE"
    RESTAURANT = "RESTAURANT"
    SERVICE = "SERVICE"
    OFFICE = "OFFICE"
    HOSPITAL = "HOSPITAL"
    SCHOOL = "SCHOOL"
    BANK = "BANK"
    ATM = "ATM"
    OTHER = "OTHER"


class AccountKind(str, Enum):
    BUSINESS = "business"
    INDIVIDUAL = "individual"


@dataclass
class DestinationAccount:
    """Account a payment was sent to"""

    account_number: str
    bank_name: str
    account_name: str
    is_business: Optional[bool] = None  # None: decide from the name


@dataclass
class Transaction:
    """Completed payment recorded at a location (read-only)"""

    transaction_id: str
    amount: float
    status: str
    created_at: datetime
    location_id: Optional[str] = None
    to_account: Optional[DestinationAccount] = None


@dataclass
class Location:
    """Physical place owned by the external location store"""

    location_id: str
    name: str
    address: str
    latitude: float
    longitude: float
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    location_type: LocationType = LocationType.STORE
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    transactions: List[Transaction] = field(default_factory=list)


@dataclass
class BoundingBox:
    """Lat/lon rectangle; longitudes may extend past +/-180 before splitting"""

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def longitude_ranges(self) -> List[tuple[float, float]]:
        """Longitude spans to query, split in two when the box crosses the antimeridian"""
        if self.max_lon - self.min_lon >= 360:
            return [(-180.0, 180.0)]
        if self.min_lon < -180:
            return [(self.min_lon + 360, 180.0), (-180.0, self.max_lon)]
        if self.max_lon > 180:
            return [(self.min_lon, 180.0), (-180.0, self.max_lon - 360)]
        return [(self.min_lon, self.max_lon)]


@dataclass
class PaymentSuggestion:
    """Previously paid destination suggested at a location"""

    account_number: str
    bank_name: str
    account_name: str
    frequency: int
    last_transaction_date: datetime

    @property
    def key(self) -> tuple[str, str]:
        return (self.account_number, self.bank_name)


@dataclass
class LocationMatch:
    """Location matched against a query point"""

    location_id: str
    name: str
    address: str
    latitude: float
    longitude: float
    distance: float  # meters
    confidence: float
    payment_suggestions: List[PaymentSuggestion] = field(default_factory=list)


@dataclass
class LocationUpdate:
    """Position reported by a client"""

    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    speed: Optional[float] = None
    heading: Optional[float] = None
    altitude: Optional[float] = None


@dataclass
class UserLocationState:
    """Last known position of a tracked user"""

    user_id: str
    latitude: float
    longitude: float
    accuracy: Optional[float]
    last_updated: datetime


@dataclass
class TrackingSubscription:
    user_id: str
    enabled: bool
    update_frequency_seconds: int
    proximity_radius_meters: float


@dataclass
class SubscriptionAck:
    success: bool
    message: str


@dataclass
class NotificationPreferences:
    notifications_enabled: bool
    location_notifications_enabled: bool

    @property
    def allows_location_notifications(self) -> bool:
        return self.notifications_enabled and self.location_notifications_enabled


@dataclass
class ProximityResult:
    """Outcome of a live location update"""

    is_nearby: bool
    location_name: Optional[str] = None
    distance: Optional[float] = None
    location_address: Optional[str] = None
    location_id: Optional[str] = None
    payment_suggestions: List[PaymentSuggestion] = field(default_factory=list)


@dataclass
class LocationNotification:
    """Push notification offered when a user returns to a known location"""

    title: str
    body: str
    data: Dict[str, Any]
    priority: str = "high"
