"""Interfaces of the external collaborators the domain depends on"""

from typing import Any, Dict, List, Optional, Protocol
from proximity_gateway.domain.models import BoundingBox, Location, NotificationPreferences


class LocationQuery(Protocol):
    """Read access to the location store"""

    def find_in_bounding_box(
        self,
        box: BoundingBox,
        name_filter: Optional[str] = None,
        active_only: bool = True,
    ) -> List[Location]:
        """
        Locations inside the box with their completed transactions embedded.

        Raises:
            LocationStoreError: On store failure
        """
        ...

    def get_location(self, location_id: str) -> Optional[Location]:
        ...


class UserPreferenceLookup(Protocol):
    def get_preferences(self, user_id: str) -> Optional[NotificationPreferences]:
        """
        Returns None when the user is unknown.

        Raises:
            PreferenceLookupError: On store failure
        """
        ...


class NotificationDispatcher(Protocol):
    async def send(self, user_id: str, title: str, body: str, data: Dict[str, Any]) -> bool:
        """
        Deliver a push notification. Returns False when delivery was refused.

        Raises:
            NotificationDispatchError: On transport failure
        """
        ...


class SessionStore(Protocol):
    """Key/value store with per-key expiry for ephemeral tracking state"""

    def get(self, key: str) -> Any:
        ...

    def put(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ...

    def touch(self, key: str, ttl_seconds: float) -> bool:
        ...

    def delete(self, key: str) -> bool:
        ...

    def delete_prefix(self, prefix: str) -> int:
        ...

    def keys(self, prefix: str = "") -> List[str]:
        ...

    def purge_expired(self) -> int:
        ...
