"""
Live location tracking with "you're back at a known place" notifications.

Per user: NOT_TRACKED -> TRACKED on the first location update or an enabled
subscription; back to NOT_TRACKED on unsubscribe, disconnect, or after
going idle (no update within idle_seconds, enforced by sweep()).

All ephemeral state lives in a SessionStore:
- location:{user_id}                   UserLocationState, idle TTL
- subscription:{user_id}               TrackingSubscription, idle TTL
- cooldown:{user_id}:{location_id}     dispatch time, cooldown TTL
"""

import asyncio
import logging
import math
import time
import weakref
from datetime import datetime, timezone
from typing import Callable, Optional
from proximity_gateway.domain.models import (
    LocationUpdate,
    ProximityResult,
    SubscriptionAck,
    TrackingSubscription,
    UserLocationState,
)
from proximity_gateway.domain.ports import NotificationDispatcher, SessionStore, UserPreferenceLookup
from proximity_gateway.domain.exceptions import (
    InvalidSubscriptionError,
    NotificationDispatchError,
    PreferenceLookupError,
)
from proximity_gateway.domain.geo import is_valid_coordinate
from proximity_gateway.domain.matching import NearbyRanker
from proximity_gateway.domain.notifications import build_location_notification
from proximity_gateway.infrastructure.observability.logging import log_notification, log_proximity_check
from proximity_gateway.infrastructure.observability.metrics import (
    record_match,
    record_notification,
    tracked_users_gauge,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProximityTracker:
    """Tracks users' live positions and notifies them near places they can pay"""

    def __init__(
        self,
        ranker: NearbyRanker,
        preferences: UserPreferenceLookup,
        dispatcher: NotificationDispatcher,
        store: SessionStore,
        radius: float = 40.0,
        limit: int = 5,
        max_radius: float = 1000.0,
        cooldown_seconds: float = 24 * 60 * 60,
        idle_seconds: float = 5 * 60,
        default_update_frequency: int = 30,
        title_max_length: int = 20,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.ranker = ranker
        self.preferences = preferences
        self.dispatcher = dispatcher
        self.store = store
        self.radius = radius
        self.limit = limit
        self.max_radius = max_radius
        self.cooldown_seconds = cooldown_seconds
        self.idle_seconds = idle_seconds
        self.default_update_frequency = default_update_frequency
        self.title_max_length = title_max_length
        self._clock = clock
        # One lock per cooldown key while a check-dispatch-record sequence is in flight
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    @staticmethod
    def _location_key(user_id: str) -> str:
        return f"location:{user_id}"

    @staticmethod
    def _subscription_key(user_id: str) -> str:
        return f"subscription:{user_id}"

    @staticmethod
    def _cooldown_key(user_id: str, location_id: str) -> str:
        return f"cooldown:{user_id}:{location_id}"

    async def update_location(self, user_id: str, update: LocationUpdate) -> ProximityResult:
        """
        Record the user's position and check for a nearby payment location.

        Never raises: bad coordinates or store failures come back as
        "not nearby". Notification outcome does not change the result.
        """
        start_time = time.time()

        if not is_valid_coordinate(update.latitude, update.longitude):
            logger.info("Ignoring invalid location update", extra={"user_id": user_id})
            return ProximityResult(is_nearby=False)

        try:
            self.store.put(
                self._location_key(user_id),
                UserLocationState(
                    user_id=user_id,
                    latitude=update.latitude,
                    longitude=update.longitude,
                    accuracy=update.accuracy,
                    last_updated=self._clock(),
                ),
                ttl_seconds=self.idle_seconds,
            )
            subscription = self.get_subscription(user_id)
            if subscription is not None:
                self.store.touch(self._subscription_key(user_id), self.idle_seconds)
            tracked_users_gauge.set(self.active_user_count())

            radius = subscription.proximity_radius_meters if subscription else self.radius
            result = self._check_proximity(update.latitude, update.longitude, radius)
        except Exception as e:
            logger.error(f"Error updating user location: {e}", extra={"user_id": user_id})
            return ProximityResult(is_nearby=False)

        duration_ms = (time.time() - start_time) * 1000
        log_proximity_check(user_id, result.is_nearby, result.location_id, result.distance, duration_ms)

        if result.is_nearby:
            try:
                await self._notify_if_needed(user_id, result)
            except Exception as e:
                logger.error(f"Error sending location notification: {e}", extra={"user_id": user_id})

        return result

    def _check_proximity(self, latitude: float, longitude: float, radius: float) -> ProximityResult:
        matches = self.ranker.find_nearby(latitude, longitude, radius, self.limit)
        nearby = next((m for m in matches if m.payment_suggestions), None)
        record_match("tracking", nearby is not None)

        if nearby is None:
            return ProximityResult(is_nearby=False)

        return ProximityResult(
            is_nearby=True,
            location_name=nearby.name,
            distance=nearby.distance,
            location_address=nearby.address,
            location_id=nearby.location_id,
            payment_suggestions=nearby.payment_suggestions,
        )

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    async def _notify_if_needed(self, user_id: str, result: ProximityResult) -> bool:
        """
        Check cooldown, preferences, dispatch and record cooldown as one step per
        (user, location), so concurrent updates cannot double-notify.

        Returns True if a notification was delivered.
        """
        key = self._cooldown_key(user_id, result.location_id)
        lock = self._lock_for(key)

        async with lock:
            if self.store.get(key) is not None:
                record_notification("cooldown")
                log_notification(user_id, result.location_id, "cooldown")
                return False

            try:
                preferences = self.preferences.get_preferences(user_id)
            except PreferenceLookupError as e:
                logger.warning(f"Preference lookup failed: {e}", extra={"user_id": user_id})
                preferences = None

            if preferences is None or not preferences.allows_location_notifications:
                record_notification("disabled")
                log_notification(user_id, result.location_id, "disabled")
                return False

            notification = build_location_notification(result, self.title_max_length)
            try:
                delivered = await self.dispatcher.send(
                    user_id, notification.title, notification.body, notification.data
                )
            except NotificationDispatchError as e:
                logger.warning(f"Push dispatch error: {e}", extra={"user_id": user_id})
                delivered = False

            if not delivered:
                record_notification("failed")
                log_notification(user_id, result.location_id, "failed")
                return False

            self.store.put(key, self._clock(), ttl_seconds=self.cooldown_seconds)
            record_notification("sent")
            log_notification(user_id, result.location_id, "sent")
            return True

    def subscribe(
        self,
        user_id: str,
        enabled: bool,
        update_frequency_seconds: Optional[int] = None,
        proximity_radius_meters: Optional[float] = None,
    ) -> SubscriptionAck:
        """
        Start or stop tracking a user.

        Raises:
            InvalidSubscriptionError: Frequency or radius out of range
        """
        if not enabled:
            self.unsubscribe(user_id)
            return SubscriptionAck(success=True, message="Location tracking disabled successfully")

        frequency = self.default_update_frequency if update_frequency_seconds is None else update_frequency_seconds
        radius = self.radius if proximity_radius_meters is None else proximity_radius_meters

        if frequency <= 0:
            raise InvalidSubscriptionError(f"Update frequency must be positive, got {frequency}")
        if not math.isfinite(radius) or radius <= 0 or radius > self.max_radius:
            raise InvalidSubscriptionError(
                f"Proximity radius must be in (0, {self.max_radius}] meters, got {radius}"
            )

        self.store.put(
            self._subscription_key(user_id),
            TrackingSubscription(
                user_id=user_id,
                enabled=True,
                update_frequency_seconds=int(frequency),
                proximity_radius_meters=float(radius),
            ),
            ttl_seconds=self.idle_seconds,
        )
        tracked_users_gauge.set(self.active_user_count())
        logger.info("Location tracking enabled", extra={"user_id": user_id, "radius_m": radius})
        return SubscriptionAck(success=True, message="Location tracking enabled successfully")

    def unsubscribe(self, user_id: str) -> None:
        """Forget everything about the user, including notification cooldowns"""
        self.store.delete(self._location_key(user_id))
        self.store.delete(self._subscription_key(user_id))
        self.store.delete_prefix(f"cooldown:{user_id}:")
        tracked_users_gauge.set(self.active_user_count())
        logger.info("Removed user from location tracking", extra={"user_id": user_id})

    def disconnect(self, user_id: str) -> None:
        self.unsubscribe(user_id)

    def get_user_location(self, user_id: str) -> Optional[UserLocationState]:
        return self.store.get(self._location_key(user_id))

    def get_subscription(self, user_id: str) -> Optional[TrackingSubscription]:
        return self.store.get(self._subscription_key(user_id))

    def is_tracked(self, user_id: str) -> bool:
        return self.get_user_location(user_id) is not None or self.get_subscription(user_id) is not None

    def active_user_count(self) -> int:
        users = {key.split(":", 1)[1] for key in self.store.keys("location:")}
        users.update(key.split(":", 1)[1] for key in self.store.keys("subscription:"))
        return len(users)

    def sweep(self) -> int:
        """Evict idle users and expired cooldowns; returns the number of entries removed"""
        removed = self.store.purge_expired()
        tracked_users_gauge.set(self.active_user_count())
        if removed:
            logger.info("Swept expired tracking state", extra={"removed": removed})
        return removed

    async def run_sweeper(self, interval_seconds: float) -> None:
        """Periodic sweep loop; runs until cancelled"""
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                self.sweep()
            except Exception as e:
                logger.error(f"Tracking sweep failed: {e}")
