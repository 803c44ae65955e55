"""
Proximity matching - finds known payment locations around a point.

Two lookups share one candidate search:
- ProximityMatcher.find_exact: the single closest confident match (precise mode)
- NearbyRanker.find_nearby: ranked listing with suggestions deduplicated across locations

Candidate search is a two-step filter: an approximate bounding box query
against the store, then an exact haversine distance check.
"""

import logging
from functools import cmp_to_key
from typing import List, NamedTuple, Optional
from proximity_gateway.domain.models import Location, LocationMatch, PaymentSuggestion
from proximity_gateway.domain.ports import LocationQuery
from proximity_gateway.domain.exceptions import LocationStoreError
from proximity_gateway.domain.geo import (
    bounding_box,
    haversine_distance,
    is_valid_coordinate,
    is_valid_radius,
)
from proximity_gateway.domain.confidence import calculate_confidence
from proximity_gateway.domain.suggestions import PaymentSuggestionExtractor, deduplicate_suggestions

logger = logging.getLogger(__name__)


class Candidate(NamedTuple):
    location: Location
    distance: float


class ProximitySearch:
    """Bounding box prefilter + exact haversine filter over the location store"""

    def __init__(self, store: LocationQuery):
        self.store = store

    @staticmethod
    def distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        return haversine_distance(lat1, lon1, lat2, lon2)

    def candidates(
        self,
        latitude: float,
        longitude: float,
        radius_meters: float,
        name_hint: Optional[str] = None,
    ) -> List[Candidate]:
        """
        Active locations within radius_meters of the point, with their distance.

        Invalid coordinates/radius and store failures yield an empty list.
        """
        if not is_valid_coordinate(latitude, longitude) or not is_valid_radius(radius_meters):
            logger.info(
                "Ignoring invalid proximity query",
                extra={"latitude": latitude, "longitude": longitude, "radius_m": radius_meters},
            )
            return []

        box = bounding_box(latitude, longitude, radius_meters)
        name_filter = name_hint.strip() if name_hint else None

        try:
            locations = self.store.find_in_bounding_box(box, name_filter=name_filter or None)
        except LocationStoreError as e:
            logger.error(f"Location store error: {e}")
            return []

        candidates = []
        for location in locations:
            if not is_valid_coordinate(location.latitude, location.longitude):
                logger.warning("Skipping location with invalid coordinates", extra={"location_id": location.location_id})
                continue
            distance = self.distance(latitude, longitude, location.latitude, location.longitude)
            if distance <= radius_meters:
                candidates.append(Candidate(location, distance))

        return candidates


def _to_match(candidate: Candidate, confidence: float, suggestions: List[PaymentSuggestion]) -> LocationMatch:
    location = candidate.location
    return LocationMatch(
        location_id=location.location_id,
        name=location.name,
        address=location.address,
        latitude=location.latitude,
        longitude=location.longitude,
        distance=candidate.distance,
        confidence=confidence,
        payment_suggestions=suggestions,
    )


class ProximityMatcher:
    """Precise mode: best single location the user is standing at"""

    def __init__(
        self,
        search: ProximitySearch,
        extractor: PaymentSuggestionExtractor,
        default_radius: float = 50.0,
        min_confidence: float = 0.70,
    ):
        self.search = search
        self.extractor = extractor
        self.default_radius = default_radius
        self.min_confidence = min_confidence

    def find_exact(
        self,
        latitude: float,
        longitude: float,
        name_hint: Optional[str] = None,
        radius: Optional[float] = None,
    ) -> Optional[LocationMatch]:
        """
        Closest location with confidence >= min_confidence and at least one suggestion.

        Returns None when nothing qualifies.
        """
        radius = self.default_radius if radius is None else radius
        name_hint = name_hint.strip() if name_hint else None
        matches = []

        for candidate in self.search.candidates(latitude, longitude, radius, name_hint):
            confidence = calculate_confidence(candidate.distance, name_hint, candidate.location.name)
            if confidence < self.min_confidence:
                continue

            suggestions = self.extractor.extract(candidate.location.transactions)
            if not suggestions:
                continue

            matches.append(_to_match(candidate, confidence, suggestions))

        if not matches:
            return None

        matches.sort(key=lambda m: m.distance)
        return matches[0]

    def suggestions_for_location(self, location_id: str, limit: int = 5) -> List[PaymentSuggestion]:
        """Top suggestions for a known location; empty if it does not exist"""
        try:
            location = self.search.store.get_location(location_id)
        except LocationStoreError as e:
            logger.error(f"Location store error: {e}")
            return []

        if location is None or not location.is_active:
            return []

        return self.extractor.extract(location.transactions)[: max(limit, 0)]


class NearbyRanker:
    """Listing mode: every location in range, closest first"""

    def __init__(
        self,
        search: ProximitySearch,
        extractor: PaymentSuggestionExtractor,
        default_radius: float = 1000.0,
        default_limit: int = 10,
        tie_break_window: float = 10.0,
    ):
        self.search = search
        self.extractor = extractor
        self.default_radius = default_radius
        self.default_limit = default_limit
        self.tie_break_window = tie_break_window

    def _compare(self, a: LocationMatch, b: LocationMatch) -> int:
        # Distances within the window count as a tie, decided by confidence
        if abs(a.distance - b.distance) > self.tie_break_window:
            return -1 if a.distance < b.distance else 1
        if a.confidence != b.confidence:
            return -1 if a.confidence > b.confidence else 1
        return 0

    def find_nearby(
        self,
        latitude: float,
        longitude: float,
        radius: Optional[float] = None,
        limit: Optional[int] = None,
    ) -> List[LocationMatch]:
        """
        Locations within radius, ranked and deduplicated.

        Each (account_number, bank_name) appears under at most one match,
        the closest; matches left without suggestions are dropped.
        """
        radius = self.default_radius if radius is None else radius
        limit = self.default_limit if limit is None else limit
        if limit <= 0:
            return []

        candidates = self.search.candidates(latitude, longitude, radius)
        transactions = {c.location.location_id: c.location.transactions for c in candidates}

        matches = [_to_match(c, calculate_confidence(c.distance), []) for c in candidates]
        matches.sort(key=lambda m: m.distance)
        matches.sort(key=cmp_to_key(self._compare))

        top = matches[:limit]
        for match in top:
            match.payment_suggestions = self.extractor.extract(transactions[match.location_id])

        return deduplicate_suggestions(top)
