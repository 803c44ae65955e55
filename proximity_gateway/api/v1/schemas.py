"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional


class PaymentSuggestionSchema(BaseModel):
    """Previously paid business account"""

    model_config = ConfigDict(from_attributes=True)

    account_number: str
    bank_name: str
    account_name: str
    frequency: int
    last_transaction_date: datetime


class LocationMatchSchema(BaseModel):
    """Location matched near the query point"""

    model_config = ConfigDict(from_attributes=True)

    location_id: str
    name: str
    address: str
    latitude: float
    longitude: float
    distance: float = Field(..., description="Distance from the query point in meters")
    confidence: float
    payment_suggestions: List[PaymentSuggestionSchema]


class PreciseSuggestionsData(BaseModel):
    match: Optional[LocationMatchSchema] = None
    suggestions: List[PaymentSuggestionSchema]


class PreciseSuggestionsResponse(BaseModel):
    """Response for GET /v1/locations/suggestions/precise"""

    success: bool
    message: str
    data: PreciseSuggestionsData


class NearbySuggestionsData(BaseModel):
    locations: List[LocationMatchSchema]
    total: int


class NearbySuggestionsResponse(BaseModel):
    """Response for GET /v1/locations/suggestions/nearby"""

    success: bool
    message: str
    data: NearbySuggestionsData


class LocationSuggestionsResponse(BaseModel):
    """Response for GET /v1/locations/{location_id}/suggestions"""

    location_id: str
    suggestions: List[PaymentSuggestionSchema]


class LocationUpdateRequest(BaseModel):
    """Request body for POST /v1/tracking/{user_id}/location"""

    latitude: float = Field(..., ge=-90, le=90, description="User latitude")
    longitude: float = Field(..., ge=-180, le=180, description="User longitude")
    accuracy: Optional[float] = Field(None, ge=0, description="Location accuracy in meters")
    speed: Optional[float] = Field(None, description="Speed in meters per second")
    heading: Optional[float] = Field(None, description="Heading in degrees")
    altitude: Optional[float] = Field(None, description="Altitude in meters")


class ProximityResultSchema(BaseModel):
    """Response for a location update"""

    model_config = ConfigDict(from_attributes=True)

    is_nearby: bool
    location_name: Optional[str] = None
    distance: Optional[float] = None
    location_address: Optional[str] = None
    location_id: Optional[str] = None
    payment_suggestions: List[PaymentSuggestionSchema] = []


class SubscriptionSettings(BaseModel):
    enabled: bool = Field(..., description="Whether to enable location tracking")
    update_frequency: Optional[int] = Field(None, description="Update frequency in seconds (default: 30)")
    proximity_radius: Optional[float] = Field(None, description="Proximity radius in meters (default: 40)")


class SubscriptionRequest(SubscriptionSettings):
    """Request body for POST /v1/tracking/subscribe"""

    user_id: str = Field(..., min_length=1, description="User identifier")


class SubscriptionResponse(BaseModel):
    success: bool
    message: str
