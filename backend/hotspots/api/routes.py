"""API routes for the hotspots service.

- GET /places: merged, deduplicated nearby places for a map center, served
  through the freshness cache
- GET /places/{place_id}/details: extended info for a single place

Service instances are created lazily and injected with ``Depends`` so tests
can swap them through ``app.dependency_overrides``.
"""

import logging

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from hotspots.config import Settings, get_settings
from hotspots.models import (
    AppError,
    ConfigurationError,
    PlaceDetails,
    PlacesResponse,
    UpstreamProviderError,
)
from hotspots.services import (
    CacheService,
    GooglePlacesFetcher,
    InMemoryCacheService,
    PlacesCache,
    RedisCacheService,
)
from hotspots.utils.geo import MAX_RADIUS_METERS

logger = logging.getLogger(__name__)

router = APIRouter()

# Provider limit for Nearby Search radius
PROVIDER_MAX_RADIUS_METERS = 50000

# Service instances
_cache_service: CacheService | None = None
_places_fetcher: GooglePlacesFetcher | None = None
_places_cache: PlacesCache | None = None


def get_cache_service(settings: Settings = Depends(get_settings)) -> CacheService:
    global _cache_service
    if _cache_service is None:
        if settings.redis_url:
            _cache_service = RedisCacheService(settings.redis_url)
        else:
            logger.info("REDIS_URL is empty; using in-memory places cache")
            _cache_service = InMemoryCacheService()
    return _cache_service


def get_places_fetcher(settings: Settings = Depends(get_settings)) -> GooglePlacesFetcher:
    global _places_fetcher
    if _places_fetcher is None:
        _places_fetcher = GooglePlacesFetcher(
            api_key=settings.google_places_api_key,
            timeout=settings.timeout_seconds,
            max_retries=settings.max_retries,
            isolate_category_failures=settings.isolate_category_failures,
        )
    return _places_fetcher


def get_places_cache(
    settings: Settings = Depends(get_settings),
    backend: CacheService = Depends(get_cache_service),
    fetcher: GooglePlacesFetcher = Depends(get_places_fetcher),
) -> PlacesCache:
    global _places_cache
    if _places_cache is None:
        _places_cache = PlacesCache(
            backend=backend,
            fetcher=fetcher,
            categories=settings.categories,
            ttl_seconds=settings.cache_ttl_seconds,
            max_results=settings.max_results,
        )
    return _places_cache


async def close_services() -> None:
    """Close shared clients. Called on application shutdown."""
    global _cache_service, _places_fetcher, _places_cache
    if _places_fetcher is not None:
        await _places_fetcher.close()
    if _cache_service is not None:
        await _cache_service.close()
    _cache_service = None
    _places_fetcher = None
    _places_cache = None


@router.get(
    "/places",
    response_model=PlacesResponse,
    response_model_exclude_none=True,
    responses={400: {"model": AppError}, 500: {"model": AppError}},
)
async def get_places(
    response: Response,
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius_meters: int = Query(
        MAX_RADIUS_METERS, alias="radiusMeters", ge=1, le=PROVIDER_MAX_RADIUS_METERS
    ),
    places_cache: PlacesCache = Depends(get_places_cache),
) -> PlacesResponse:
    """Nearby hotspots for a map center.

    Configuration and provider failures propagate to the exception
    handlers in ``hotspots.main`` (500). Cache failures never do.
    """
    lookup = await places_cache.get_places(lat, lng, radius_meters)
    response.headers["X-Places-Source"] = lookup.source
    return PlacesResponse(places=lookup.places)


@router.get(
    "/places/{place_id}/details",
    response_model=PlaceDetails,
    response_model_exclude_none=True,
    responses={400: {"model": AppError}, 500: {"model": AppError}},
)
async def get_place_details(
    place_id: str,
    settings: Settings = Depends(get_settings),
    fetcher: GooglePlacesFetcher = Depends(get_places_fetcher),
    cache: CacheService = Depends(get_cache_service),
):
    """Extended info (address, accessibility, open now) for one place.

    Uses cache when available.
    """
    cache_key = CacheService.build_details_key(place_id)
    try:
        cached = await cache.get(cache_key)
        if isinstance(cached, dict):
            return PlaceDetails(**cached)
    except Exception as e:
        logger.warning(f"[CACHE] Details cache unavailable for {place_id}: {e}")

    try:
        details = await fetcher.fetch_place_details(place_id)
    except ConfigurationError:
        raise
    except (UpstreamProviderError, ValueError) as e:
        return JSONResponse(
            status_code=400,
            content={"error": str(e), "code": UpstreamProviderError.code.value},
        )

    try:
        await cache.set(
            cache_key,
            details.model_dump(mode="json", exclude_none=True),
            ttl_seconds=settings.cache_ttl_seconds,
        )
    except Exception as e:
        logger.warning(f"[CACHE] Could not store details for {place_id}: {e}")

    return details
