"""Geo utilities for map and hotspot positioning."""

import math
from typing import Iterable

from hotspots.models import BoundingBox, PlaceResult

EARTH_RADIUS_METERS = 6_371_000
KM_PER_MILE = 1.60934
KM_PER_DEGREE_LAT = 111.32

# Times Square, used when the player position is unknown
DEFAULT_CENTER = (40.758, -73.9855)

PROXIMITY_METERS = 75
BOUNDING_RADIUS_MILES = 1
BOUNDING_RADIUS_METERS = 1609
MAX_RADIUS_MILES = 15
MAX_RADIUS_METERS = 24140


def bounding_box(
    lat: float, lng: float, radius_miles: float = BOUNDING_RADIUS_MILES
) -> BoundingBox:
    """Box of ``radius_miles`` around a center point.

    The longitude span widens with latitude (meridian convergence). At the
    poles ``cos(lat)`` is zero and the longitude delta blows up; callers
    must not pass ``|lat| == 90``.
    """
    radius_km = radius_miles * KM_PER_MILE
    delta_lat = radius_km / KM_PER_DEGREE_LAT
    delta_lng = radius_km / (KM_PER_DEGREE_LAT * math.cos(math.radians(lat)))

    return BoundingBox(
        north=lat + delta_lat,
        south=lat - delta_lat,
        east=lng + delta_lng,
        west=lng - delta_lng,
    )


def haversine_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in meters between two points."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lng / 2) ** 2
    )
    # rounding can push a just past 1 for antipodal points
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def is_within(
    lat: float, lng: float, place: PlaceResult, meters: float = PROXIMITY_METERS
) -> bool:
    """True if ``place`` is within ``meters`` of the given point."""
    return haversine_meters(lat, lng, place.lat, place.lng) <= meters


def sort_by_distance(
    lat: float, lng: float, places: Iterable[PlaceResult]
) -> list[PlaceResult]:
    """Places ordered nearest first. Ties keep their input order."""
    return sorted(places, key=lambda p: haversine_meters(lat, lng, p.lat, p.lng))
