"""Data models for the hotspots service."""

from .core import (
    CLIENT_GRID_PRECISION,
    SERVER_KEY_PRECISION,
    BoundingBox,
    CacheEntry,
    PlaceDetails,
    PlaceResult,
    PlacesResponse,
    QueryKey,
)
from .errors import (
    AppError,
    CacheBackendError,
    ConfigurationError,
    ErrorCode,
    HotspotsError,
    UpstreamProviderError,
)

__all__ = [
    # Core
    "CLIENT_GRID_PRECISION",
    "SERVER_KEY_PRECISION",
    "BoundingBox",
    "CacheEntry",
    "PlaceDetails",
    "PlaceResult",
    "PlacesResponse",
    "QueryKey",
    # Errors
    "AppError",
    "CacheBackendError",
    "ConfigurationError",
    "ErrorCode",
    "HotspotsError",
    "UpstreamProviderError",
]
