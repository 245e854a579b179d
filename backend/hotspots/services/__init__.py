"""Hotspots Services.

Service layer components:
- Cache: Redis-based caching with an in-memory LRU alternative
- Places: Google Places Nearby Search / Details client and the freshness
  cache that fronts it
"""

from .cache import CacheService, InMemoryCacheService, RedisCacheService
from .places import GooglePlacesFetcher, PlacesCache, PlacesLookup

__all__ = [
    # Cache
    "CacheService",
    "InMemoryCacheService",
    "RedisCacheService",
    # Places
    "GooglePlacesFetcher",
    "PlacesCache",
    "PlacesLookup",
]
