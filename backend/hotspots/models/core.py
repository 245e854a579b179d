"""Core data models for the hotspots service.

This module contains the Pydantic models and small value types used throughout
the service for representing places, query keys and cache entries.
"""

from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, Field

# Decimal places used to key the server-side places cache (~11m).
SERVER_KEY_PRECISION = 4
# Decimal places used by the client for "same area" detection (~111m).
CLIENT_GRID_PRECISION = 3


class PlaceResult(BaseModel):
    """A point of interest returned by the places provider.

    Field names follow the provider's wire format, which is also the JSON
    shape served by ``GET /api/places``.

    Required fields:
    - place_id: Stable provider identifier, the dedup key
    - name: Display name of the place
    - lat / lng: WGS84 coordinates
    """

    place_id: str = Field(..., min_length=1, description="Provider place identifier")
    name: str = Field(..., description="Display name of the place")
    lat: float = Field(..., description="Latitude in degrees")
    lng: float = Field(..., description="Longitude in degrees")
    rating: Optional[float] = Field(None, description="Average user rating")
    user_ratings_total: Optional[int] = Field(
        None, description="Number of user ratings"
    )
    types: Optional[list[str]] = Field(
        None, description="Place type categories, most specific first"
    )

    @property
    def primary_type(self) -> str | None:
        """First category tag, used as the marker type."""
        if self.types:
            return self.types[0]
        return None

    def to_cache_record(self) -> dict[str, Any]:
        """Serialize for the cache backend.

        Absent optional fields are omitted rather than written as null, and
        an empty ``types`` list is treated as absent.
        """
        record: dict[str, Any] = {
            "place_id": self.place_id,
            "name": self.name,
            "lat": self.lat,
            "lng": self.lng,
        }
        if self.rating is not None:
            record["rating"] = self.rating
        if self.user_ratings_total is not None:
            record["user_ratings_total"] = self.user_ratings_total
        if self.types:
            record["types"] = list(self.types)
        return record


class PlaceDetails(BaseModel):
    """Extended information for a single place (Place Details lookup)."""

    name: Optional[str] = None
    formatted_address: Optional[str] = None
    rating: Optional[float] = None
    user_ratings_total: Optional[int] = None
    wheelchair_accessible_entrance: Optional[bool] = None
    business_status: Optional[str] = None
    open_now: Optional[bool] = None
    types: Optional[list[str]] = None


class BoundingBox(BaseModel):
    """Axis-aligned latitude/longitude box, e.g. a map viewport."""

    north: float
    south: float
    east: float
    west: float

    @property
    def center(self) -> tuple[float, float]:
        """Geometric center as ``(lat, lng)``.

        Boxes crossing the antimeridian are not special-cased.
        """
        return ((self.north + self.south) / 2, (self.east + self.west) / 2)

    def contains(self, lat: float, lng: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lng <= self.east


@dataclass(frozen=True)
class QueryKey:
    """A geographic query quantized to a fixed decimal precision.

    Two queries with equal keys are treated as "the same area". The server
    cache uses ``SERVER_KEY_PRECISION`` and the client accumulator the
    coarser ``CLIENT_GRID_PRECISION``.
    """

    lat: float
    lng: float
    radius_meters: int
    precision: int = SERVER_KEY_PRECISION

    @classmethod
    def from_coordinates(
        cls,
        lat: float,
        lng: float,
        radius_meters: int,
        precision: int = SERVER_KEY_PRECISION,
    ) -> "QueryKey":
        return cls(
            lat=round(lat, precision),
            lng=round(lng, precision),
            radius_meters=radius_meters,
            precision=precision,
        )

    def cache_key(self) -> str:
        """String form used as the cache backend key.

        Example:
            >>> QueryKey.from_coordinates(40.758, -73.9855, 1609).cache_key()
            'places:40.7580_-73.9855_1609'
        """
        p = self.precision
        return f"places:{self.lat:.{p}f}_{self.lng:.{p}f}_{self.radius_meters}"


class CacheEntry(BaseModel):
    """A cached merged places list and the time it was written."""

    places: list[PlaceResult] = Field(default_factory=list)
    cached_at_ms: int = Field(..., ge=0, description="Write time, epoch milliseconds")

    def is_fresh(self, now_ms: int, ttl_ms: int) -> bool:
        return now_ms - self.cached_at_ms < ttl_ms

    def to_record(self) -> dict[str, Any]:
        return {
            "places": [p.to_cache_record() for p in self.places],
            "cachedAt": self.cached_at_ms,
        }

    @classmethod
    def from_record(cls, record: Any) -> "CacheEntry | None":
        """Rebuild an entry from its stored form.

        Returns None when the record is missing or malformed, which callers
        treat as a cache miss.
        """
        if not isinstance(record, dict):
            return None
        places = record.get("places")
        cached_at = record.get("cachedAt")
        if not isinstance(places, list) or not isinstance(cached_at, (int, float)):
            return None
        try:
            return cls(
                places=[PlaceResult(**p) for p in places],
                cached_at_ms=int(cached_at),
            )
        except (TypeError, ValueError):
            return None


class PlacesResponse(BaseModel):
    """Response body of ``GET /api/places``."""

    places: list[PlaceResult] = Field(default_factory=list)
