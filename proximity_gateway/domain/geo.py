"""Geospatial primitives: coordinate validation, bounding boxes, great-circle distance"""

import math
from haversine import Unit, haversine
from proximity_gateway.domain.models import BoundingBox
from proximity_gateway.domain.exceptions import InvalidCoordinatesError

EARTH_RADIUS_M = 6_371_000.0
METERS_PER_DEGREE_LAT = 111_320.0

# Below this cos(lat) the longitude span is treated as the whole circle
_MIN_COS_LAT = 1e-9


def is_valid_coordinate(latitude: float, longitude: float) -> bool:
    """True for finite numbers inside [-90, 90] x [-180, 180]"""
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        return False

    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def validate_coordinates(latitude: float, longitude: float) -> None:
    """
    Raises:
        InvalidCoordinatesError: if the point is not a usable coordinate
    """
    if not is_valid_coordinate(latitude, longitude):
        raise InvalidCoordinatesError(f"Invalid coordinates: ({latitude}, {longitude})")


def is_valid_radius(radius_meters: float) -> bool:
    try:
        radius = float(radius_meters)
    except (TypeError, ValueError):
        return False
    return math.isfinite(radius) and radius > 0


def bounding_box(latitude: float, longitude: float, radius_meters: float) -> BoundingBox:
    """
    Approximate box around a point, used only as a cheap prefilter.

    1 degree of latitude ~ 111,320 m; 1 degree of longitude shrinks with
    cos(latitude). Exact filtering happens afterwards with haversine_distance.
    """
    lat_delta = radius_meters / METERS_PER_DEGREE_LAT
    cos_lat = math.cos(math.radians(latitude))

    # A circle that reaches a pole spans every longitude
    if abs(cos_lat) < _MIN_COS_LAT or abs(latitude) + lat_delta >= 90.0:
        lon_delta = 180.0
    else:
        lon_delta = min(radius_meters / (METERS_PER_DEGREE_LAT * abs(cos_lat)), 180.0)

    return BoundingBox(
        min_lat=max(latitude - lat_delta, -90.0),
        max_lat=min(latitude + lat_delta, 90.0),
        min_lon=longitude - lon_delta,
        max_lon=longitude + lon_delta,
    )


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two points, on a 6,371 km sphere"""
    return haversine((lat1, lon1), (lat2, lon2), unit=Unit.RADIANS) * EARTH_RADIUS_M
