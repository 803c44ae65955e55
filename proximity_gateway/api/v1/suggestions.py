"""GET /v1/locations/... - payment suggestions around a point"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request

from proximity_gateway.api.v1.schemas import (
    LocationMatchSchema,
    LocationSuggestionsResponse,
    NearbySuggestionsData,
    NearbySuggestionsResponse,
    PaymentSuggestionSchema,
    PreciseSuggestionsData,
    PreciseSuggestionsResponse,
)
from proximity_gateway.api.dependencies import get_matcher, get_ranker, get_request_id
from proximity_gateway.domain.matching import NearbyRanker, ProximityMatcher
from proximity_gateway.infrastructure.observability.metrics import record_match

router = APIRouter()


@router.get("/locations/suggestions/precise", response_model=PreciseSuggestionsResponse)
def get_precise_suggestions(
    request: Request,
    latitude: float = Query(..., ge=-90, le=90, description="Current latitude"),
    longitude: float = Query(..., ge=-180, le=180, description="Current longitude"),
    name: Optional[str] = Query(None, description="Name of the place, if known"),
    radius: Optional[float] = Query(None, gt=0, description="Search radius in meters (default: 50)"),
    matcher: ProximityMatcher = Depends(get_matcher),
):
    """
    Exact location match and the business accounts paid there.

    Returns:
        The closest confident match, or match=null when nothing qualifies
    """
    match = matcher.find_exact(latitude, longitude, name, radius)
    record_match("exact", match is not None)
    logging.info(
        "Precise lookup completed",
        extra={"request_id": get_request_id(request), "matched": match is not None},
    )

    return PreciseSuggestionsResponse(
        success=True,
        message="Exact location match found" if match else "No exact location match found",
        data=PreciseSuggestionsData(
            match=LocationMatchSchema.model_validate(match) if match else None,
            suggestions=[PaymentSuggestionSchema.model_validate(s) for s in match.payment_suggestions] if match else [],
        ),
    )


@router.get("/locations/suggestions/nearby", response_model=NearbySuggestionsResponse)
def get_nearby_suggestions(
    latitude: float = Query(..., ge=-90, le=90, description="Current latitude"),
    longitude: float = Query(..., ge=-180, le=180, description="Current longitude"),
    radius: Optional[float] = Query(None, gt=0, description="Search radius in meters (default: 1000)"),
    limit: Optional[int] = Query(None, ge=1, le=100, description="Maximum number of results (default: 10)"),
    ranker: NearbyRanker = Depends(get_ranker),
):
    """
    Nearby locations with business payment details, closest first.

    Each business account appears under one location only.
    """
    matches = ranker.find_nearby(latitude, longitude, radius, limit)
    record_match("nearby", bool(matches))

    return NearbySuggestionsResponse(
        success=True,
        message="Nearby business payment details retrieved successfully",
        data=NearbySuggestionsData(
            locations=[LocationMatchSchema.model_validate(m) for m in matches],
            total=len(matches),
        ),
    )


@router.get("/locations/{location_id}/suggestions", response_model=LocationSuggestionsResponse)
def get_location_suggestions(
    location_id: str,
    limit: int = Query(5, ge=1, le=50, description="Maximum number of suggestions"),
    matcher: ProximityMatcher = Depends(get_matcher),
):
    """Top payment suggestions for a known location (empty list if unknown)"""
    suggestions = matcher.suggestions_for_location(location_id, limit)

    return LocationSuggestionsResponse(
        location_id=location_id,
        suggestions=[PaymentSuggestionSchema.model_validate(s) for s in suggestions],
    )
