"""Data access layer for locations and notification preferences"""

from typing import Callable, List, Optional
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from proximity_gateway.infrastructure.database.models import (
    COMPLETED,
    LocationModel,
    TransactionModel,
    UserPreferenceModel,
)
from proximity_gateway.infrastructure.observability.metrics import location_store_failures_counter
from proximity_gateway.domain.models import (
    BoundingBox,
    DestinationAccount,
    Location,
    LocationType,
    NotificationPreferences,
    Transaction,
)
from proximity_gateway.domain.exceptions import LocationStoreError, PreferenceLookupError
from proximity_gateway.utils.text_utils import normalize_name


def _to_domain_location(row: LocationModel) -> Location:
    try:
        location_type = LocationType(row.location_type)
    except ValueError:
        location_type = LocationType.OTHER

    return Location(
        location_id=row.id,
        name=row.name,
        address=row.address,
        latitude=row.latitude,
        longitude=row.longitude,
        city=row.city,
        state=row.state,
        country=row.country,
        location_type=location_type,
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
        transactions=[
            Transaction(
                transaction_id=txn.id,
                amount=txn.amount,
                status=txn.status,
                created_at=txn.created_at,
                location_id=txn.location_id,
                to_account=(
                    DestinationAccount(
                        account_number=txn.to_account.account_number,
                        bank_name=txn.to_account.bank_name,
                        account_name=txn.to_account.account_name,
                        is_business=txn.to_account.is_business,
                    )
                    if txn.to_account is not None
                    else None
                ),
            )
            for txn in row.transactions
        ],
    )


class LocationRepository:
    """Read-only location queries with completed transactions embedded"""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def _base_query(self, db: Session):
        return db.query(LocationModel).options(
            selectinload(
                LocationModel.transactions.and_(TransactionModel.status == COMPLETED)
            ).selectinload(TransactionModel.to_account)
        )

    def find_in_bounding_box(
        self,
        box: BoundingBox,
        name_filter: Optional[str] = None,
        active_only: bool = True,
    ) -> List[Location]:
        """
        Locations whose coordinates fall inside the box.

        name_filter matches case-insensitively as a substring, either as
        given or with punctuation stripped.

        Raises:
            LocationStoreError: On any database error
        """
        try:
            with self.session_factory() as db:
                query = self._base_query(db).filter(
                    LocationModel.latitude.between(box.min_lat, box.max_lat),
                    or_(*[LocationModel.longitude.between(lo, hi) for lo, hi in box.longitude_ranges()]),
                )
                if active_only:
                    query = query.filter(LocationModel.is_active.is_(True))
                if name_filter:
                    lowered = func.lower(LocationModel.name)
                    query = query.filter(
                        or_(
                            lowered.contains(name_filter.lower(), autoescape=True),
                            lowered.contains(normalize_name(name_filter).lower(), autoescape=True),
                        )
                    )
                return [_to_domain_location(row) for row in query.all()]

        except SQLAlchemyError as e:
            location_store_failures_counter.inc()
            raise LocationStoreError(f"Location query failed: {e}") from e

    def get_location(self, location_id: str) -> Optional[Location]:
        """Fetch one location with its completed transactions"""
        try:
            with self.session_factory() as db:
                row = self._base_query(db).filter(LocationModel.id == location_id).first()
                return _to_domain_location(row) if row is not None else None

        except SQLAlchemyError as e:
            location_store_failures_counter.inc()
            raise LocationStoreError(f"Location lookup failed: {e}") from e


class PreferenceRepository:
    """Repository for user notification preferences"""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get_preferences(self, user_id: str) -> Optional[NotificationPreferences]:
        """
        Raises:
            PreferenceLookupError: On any database error
        """
        try:
            with self.session_factory() as db:
                row = db.get(UserPreferenceModel, user_id)
                if row is None:
                    return None
                return NotificationPreferences(
                    notifications_enabled=row.notifications_enabled,
                    location_notifications_enabled=row.location_notifications_enabled,
                )

        except SQLAlchemyError as e:
            raise PreferenceLookupError(f"Preference lookup failed: {e}") from e
