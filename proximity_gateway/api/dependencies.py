"""Dependency injection for FastAPI endpoints"""

from functools import lru_cache
from fastapi import Request
from proximity_gateway.config import settings
from proximity_gateway.domain.matching import NearbyRanker, ProximityMatcher, ProximitySearch
from proximity_gateway.domain.suggestions import PaymentSuggestionExtractor
from proximity_gateway.domain.tracking import ProximityTracker
from proximity_gateway.infrastructure.clients.push import PushNotificationClient
from proximity_gateway.infrastructure.database.repositories import LocationRepository, PreferenceRepository
from proximity_gateway.infrastructure.database.session import get_session_factory
from proximity_gateway.infrastructure.state.memory_store import InMemorySessionStore


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


@lru_cache(maxsize=1)
def get_proximity_search() -> ProximitySearch:
    """Candidate search over the SQL location store"""
    return ProximitySearch(LocationRepository(get_session_factory()))


def _extractor() -> PaymentSuggestionExtractor:
    return PaymentSuggestionExtractor(
        ambiguous_is_business=settings.ambiguous_account_is_business,
        whole_word_keywords=settings.business_keywords_whole_word,
    )


@lru_cache(maxsize=1)
def get_matcher() -> ProximityMatcher:
    """Provide precise-mode matcher"""
    return ProximityMatcher(
        get_proximity_search(),
        _extractor(),
        default_radius=settings.exact_match_radius_m,
        min_confidence=settings.min_exact_confidence,
    )


@lru_cache(maxsize=1)
def get_ranker() -> NearbyRanker:
    """Provide nearby listing ranker"""
    return NearbyRanker(
        get_proximity_search(),
        _extractor(),
        default_radius=settings.nearby_radius_m,
        default_limit=settings.nearby_limit,
        tie_break_window=settings.tie_break_window_m,
    )


@lru_cache(maxsize=1)
def get_tracker() -> ProximityTracker:
    """Process-wide tracker; its in-memory state must outlive single requests"""
    return ProximityTracker(
        ranker=get_ranker(),
        preferences=PreferenceRepository(get_session_factory()),
        dispatcher=PushNotificationClient(),
        store=InMemorySessionStore(),
        radius=settings.tracking_radius_m,
        limit=settings.tracking_limit,
        max_radius=settings.max_proximity_radius_m,
        cooldown_seconds=settings.notification_cooldown_seconds,
        idle_seconds=settings.idle_eviction_seconds,
        default_update_frequency=settings.default_update_frequency_seconds,
        title_max_length=settings.notification_title_max_length,
    )
