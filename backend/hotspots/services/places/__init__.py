"""Places service module.

Provides the Google Places fetcher and the freshness cache in front of it.
"""

from .cache import PlacesCache, PlacesLookup
from .fetcher import GooglePlacesFetcher, normalize_place

__all__ = [
    "GooglePlacesFetcher",
    "PlacesCache",
    "PlacesLookup",
    "normalize_place",
]
