"""Places cache with time-based freshness.

Lookup per quantized query key (4 decimal places + radius):

- fresh hit  (now - cachedAt <  TTL): return the cached list, no provider calls
- stale hit  (now - cachedAt >= TTL): same as a miss
- miss: fetch every category, merge, store {places, cachedAt}, return
- backend error on read or write: log a warning and serve the directly
  fetched list without caching it

Staleness is judged from the stored ``cachedAt`` timestamp only; entries are
never deleted, just overwritten on the next refresh. There is no per-key
lock, so concurrent misses both fetch and the last write wins.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Sequence

from hotspots.models import CacheEntry, PlaceResult, QueryKey
from hotspots.services.cache import CacheService
from hotspots.services.places.fetcher import GooglePlacesFetcher

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60
DEFAULT_MAX_RESULTS = 60


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class PlacesLookup:
    """Result of a cached places lookup."""

    places: list[PlaceResult]
    source: str  # "cache", "api" or "api_uncached"


class PlacesCache:
    """Freshness cache in front of the places fetcher."""

    def __init__(
        self,
        backend: CacheService,
        fetcher: GooglePlacesFetcher,
        categories: Sequence[str],
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_results: int = DEFAULT_MAX_RESULTS,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._backend = backend
        self._fetcher = fetcher
        self._categories = list(categories)
        self._ttl_ms = ttl_seconds * 1000
        self._max_results = max_results
        self._clock = clock or _now_ms

    async def _fetch(self, lat: float, lng: float, radius_meters: int) -> list[PlaceResult]:
        return await self._fetcher.fetch_categories(
            lat, lng, radius_meters, self._categories, limit=self._max_results
        )

    async def _read(self, key: str) -> CacheEntry | None:
        record = await self._backend.get(key)
        if record is None:
            return None
        entry = CacheEntry.from_record(record)
        if entry is None:
            logger.warning(f"[CACHE] Ignoring malformed entry for {key}")
        return entry

    async def get_places(
        self, lat: float, lng: float, radius_meters: int
    ) -> PlacesLookup:
        """Return merged places around a point, using the cache when fresh.

        Raises:
            ConfigurationError: If the fetcher has no API key.
            UpstreamProviderError: If the provider lookup fails.
        """
        key = QueryKey.from_coordinates(lat, lng, radius_meters).cache_key()

        try:
            entry = await self._read(key)
        except Exception as e:  # any backend failure degrades to a direct fetch
            logger.warning(f"[CACHE] Cache unavailable, fetching from Places API: {e}")
            places = await self._fetch(lat, lng, radius_meters)
            return PlacesLookup(places=places, source="api_uncached")

        now = self._clock()
        if entry is not None and entry.is_fresh(now, self._ttl_ms):
            logger.info(f"[CACHE] HIT {key} ({len(entry.places)} places)")
            return PlacesLookup(places=entry.places, source="cache")

        logger.info(f"[CACHE] {'STALE' if entry is not None else 'MISS'} {key}")
        places = await self._fetch(lat, lng, radius_meters)

        new_entry = CacheEntry(places=places, cached_at_ms=self._clock())
        try:
            await self._backend.set(key, new_entry.to_record())
        except Exception as e:
            logger.warning(f"[CACHE] Could not store {key}: {e}")
            return PlacesLookup(places=places, source="api_uncached")

        return PlacesLookup(places=places, source="api")
