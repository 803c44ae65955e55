"""Pytest fixtures for testing"""

import asyncio
import math
import pytest
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Generator, List, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from proximity_gateway.api.main import create_app
from proximity_gateway.api.dependencies import get_matcher, get_ranker, get_tracker
from proximity_gateway.infrastructure.database.models import (
    COMPLETED,
    AccountModel,
    Base,
    LocationModel,
    TransactionModel,
    UserPreferenceModel,
)
from proximity_gateway.infrastructure.database.repositories import LocationRepository, PreferenceRepository
from proximity_gateway.infrastructure.state.memory_store import InMemorySessionStore
from proximity_gateway.domain.geo import EARTH_RADIUS_M
from proximity_gateway.domain.matching import NearbyRanker, ProximityMatcher, ProximitySearch
from proximity_gateway.domain.suggestions import PaymentSuggestionExtractor
from proximity_gateway.domain.tracking import ProximityTracker
from proximity_gateway.domain.exceptions import LocationStoreError
from proximity_gateway.domain.models import (
    BoundingBox,
    DestinationAccount,
    Location,
    NotificationPreferences,
    Transaction,
)
from proximity_gateway.utils.text_utils import normalize_name

KINGS_LAT = 6.5244
KINGS_LON = 3.3792
BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeLocationStore:
    """In-memory location store applying the same box/name filtering as the SQL repository"""

    def __init__(self, locations: Optional[List[Location]] = None):
        self.locations = list(locations or [])
        self.queries: List[tuple] = []

    def find_in_bounding_box(self, box: BoundingBox, name_filter=None, active_only=True) -> List[Location]:
        self.queries.append((box, name_filter))
        results = []
        for location in self.locations:
            if active_only and not location.is_active:
                continue
            if not box.min_lat <= location.latitude <= box.max_lat:
                continue
            if not any(lo <= location.longitude <= hi for lo, hi in box.longitude_ranges()):
                continue
            if name_filter:
                name = location.name.lower()
                if name_filter.lower() not in name and normalize_name(name_filter).lower() not in name:
                    continue
            results.append(location)
        return results

    def get_location(self, location_id: str) -> Optional[Location]:
        return next((loc for loc in self.locations if loc.location_id == location_id), None)


class FailingLocationStore:
    def find_in_bounding_box(self, box, name_filter=None, active_only=True):
        raise LocationStoreError("connection refused")

    def get_location(self, location_id):
        raise LocationStoreError("connection refused")


class FakePreferences:
    def __init__(self, preferences: Optional[Dict[str, NotificationPreferences]] = None, error: Exception = None):
        self.preferences = preferences or {}
        self.error = error

    def get_preferences(self, user_id: str) -> Optional[NotificationPreferences]:
        if self.error:
            raise self.error
        return self.preferences.get(user_id)


class FakeDispatcher:
    """Records notifications; optionally fails or yields to the event loop before answering"""

    def __init__(self, result: bool = True, error: Exception = None, delay: float = 0.0):
        self.result = result
        self.error = error
        self.delay = delay
        self.sent: List[dict] = []

    async def send(self, user_id, title, body, data) -> bool:
        if self.delay:
            await asyncio.sleep(self.delay)
        self.sent.append({"user_id": user_id, "title": title, "body": body, "data": data})
        if self.error:
            raise self.error
        return self.result


class FakeClock:
    """Monotonic clock that only moves when told to"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def point_north_of(latitude: float, longitude: float, meters: float) -> tuple[float, float]:
    """Point exactly `meters` north along the meridian (exact under haversine)"""
    return latitude + math.degrees(meters / EARTH_RADIUS_M), longitude


@pytest.fixture
def north_of() -> Callable[..., tuple[float, float]]:
    return point_north_of


@pytest.fixture
def make_location() -> Callable[..., Location]:
    """Build a domain Location with payments given as (account_number, bank, account_name[, days_ago])"""

    def _make(
        location_id: str,
        name: str,
        latitude: float,
        longitude: float,
        payments: Optional[List[tuple]] = None,
        is_active: bool = True,
        address: str = "12 Allen Avenue, Ikeja, Lagos",
    ) -> Location:
        transactions = []
        for i, payment in enumerate(payments or []):
            account_number, bank_name, account_name = payment[:3]
            days_ago = payment[3] if len(payment) > 3 else i
            transactions.append(
                Transaction(
                    transaction_id=f"{location_id}_tx_{i}",
                    amount=2500.0,
                    status=COMPLETED,
                    created_at=BASE_TIME - timedelta(days=days_ago),
                    location_id=location_id,
                    to_account=DestinationAccount(account_number, bank_name, account_name),
                )
            )
        return Location(
            location_id=location_id,
            name=name,
            address=address,
            latitude=latitude,
            longitude=longitude,
            is_active=is_active,
            transactions=transactions,
        )

    return _make


@pytest.fixture
def kings_store(make_location) -> Location:
    """Kings Store: 3 payments to the shop account, 1 to a person"""
    return make_location(
        "loc_kings",
        "Kings Store",
        KINGS_LAT,
        KINGS_LON,
        payments=[
            ("0011122233", "GTBank", "Kings Store Enterprises", 1),
            ("0011122233", "GTBank", "Kings Store Enterprises", 2),
            ("0011122233", "GTBank", "Kings Store Enterprises", 3),
            ("0044455566", "Access Bank", "Tunde Bello", 0),
        ],
    )


@pytest.fixture
def extractor() -> PaymentSuggestionExtractor:
    return PaymentSuggestionExtractor()


@pytest.fixture
def location_store(kings_store) -> FakeLocationStore:
    return FakeLocationStore([kings_store])


@pytest.fixture
def failing_store() -> FailingLocationStore:
    return FailingLocationStore()


@pytest.fixture
def matcher(location_store, extractor) -> ProximityMatcher:
    return ProximityMatcher(ProximitySearch(location_store), extractor)


@pytest.fixture
def ranker(location_store, extractor) -> NearbyRanker:
    return NearbyRanker(ProximitySearch(location_store), extractor)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session_store(clock) -> InMemorySessionStore:
    return InMemorySessionStore(clock=clock)


@pytest.fixture
def preferences() -> FakePreferences:
    return FakePreferences({"user_1": NotificationPreferences(True, True)})


@pytest.fixture
def dispatcher() -> FakeDispatcher:
    return FakeDispatcher()


@pytest.fixture
def tracker(ranker, preferences, dispatcher, session_store) -> ProximityTracker:
    return ProximityTracker(ranker, preferences, dispatcher, session_store)


@pytest.fixture
def db_session_factory() -> Generator[sessionmaker, None, None]:
    """Create test database; repositories open their own sessions from this factory"""
    Base.metadata.create_all(bind=engine)
    try:
        yield TestingSessionLocal
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session_factory, dispatcher) -> TestClient:
    """Create FastAPI test client wired to the test database and a fake push dispatcher"""
    app = create_app()

    extractor = PaymentSuggestionExtractor()
    search = ProximitySearch(LocationRepository(db_session_factory))
    api_matcher = ProximityMatcher(search, extractor)
    api_ranker = NearbyRanker(search, extractor)
    api_tracker = ProximityTracker(
        api_ranker,
        PreferenceRepository(db_session_factory),
        dispatcher,
        InMemorySessionStore(),
    )

    app.dependency_overrides[get_matcher] = lambda: api_matcher
    app.dependency_overrides[get_ranker] = lambda: api_ranker
    app.dependency_overrides[get_tracker] = lambda: api_tracker
    return TestClient(app)


@pytest.fixture
def seed_location(db_session_factory) -> Callable[..., str]:
    """Insert a location row with completed payments given as (account_number, bank, account_name[, days_ago])"""

    def _seed(
        location_id: str,
        name: str,
        latitude: float,
        longitude: float,
        payments: Optional[List[tuple]] = None,
        is_active: bool = True,
        status: str = COMPLETED,
    ) -> str:
        with db_session_factory() as db:
            db.add(
                LocationModel(
                    id=location_id,
                    name=name,
                    address="12 Allen Avenue, Ikeja, Lagos",
                    city="Lagos",
                    latitude=latitude,
                    longitude=longitude,
                    is_active=is_active,
                )
            )
            accounts: Dict[tuple, AccountModel] = {}
            for i, payment in enumerate(payments or []):
                account_number, bank_name, account_name = payment[:3]
                days_ago = payment[3] if len(payment) > 3 else i
                key = (account_number, bank_name)
                if key not in accounts:
                    accounts[key] = AccountModel(
                        account_number=account_number, bank_name=bank_name, account_name=account_name
                    )
                    db.add(accounts[key])
                db.add(
                    TransactionModel(
                        amount=2500.0,
                        status=status,
                        location_id=location_id,
                        to_account=accounts[key],
                        created_at=BASE_TIME - timedelta(days=days_ago),
                    )
                )
            db.commit()
        return location_id

    return _seed


@pytest.fixture
def seed_preferences(db_session_factory) -> Callable[..., None]:
    def _seed(user_id: str, notifications_enabled: bool = True, location_notifications_enabled: bool = True) -> None:
        with db_session_factory() as db:
            db.add(
                UserPreferenceModel(
                    user_id=user_id,
                    notifications_enabled=notifications_enabled,
                    location_notifications_enabled=location_notifications_enabled,
                )
            )
            db.commit()

    return _seed
