"""Google Places client for nearby hotspot discovery.

Architecture:
- One Nearby Search request per category, fanned out with asyncio.gather
- Provider records are normalized into PlaceResult at this boundary
- Per-category lists are merged in declared category order once all
  requests have completed, so the output does not depend on which request
  finishes first
- Shared httpx client with a request timeout; optional bounded retry on
  transport failures only

Status handling follows the provider contract: ``OK`` and ``ZERO_RESULTS``
are successes, anything else is an UpstreamProviderError.
"""

import asyncio
import logging
from typing import Any, Iterable

import httpx

from hotspots.models import (
    ConfigurationError,
    PlaceDetails,
    PlaceResult,
    UpstreamProviderError,
)
from hotspots.utils.merge import merge_places

logger = logging.getLogger(__name__)

SUCCESS_STATUSES = ("OK", "ZERO_RESULTS")

DETAILS_FIELDS = (
    "name",
    "formatted_address",
    "rating",
    "user_ratings_total",
    "wheelchair_accessible_entrance",
    "business_status",
    "opening_hours/open_now",
    "types",
)


def normalize_place(raw: dict[str, Any]) -> PlaceResult | None:
    """Convert a Nearby Search record into a PlaceResult.

    Returns None for records missing an id or coordinates.
    """
    place_id = raw.get("place_id")
    location = (raw.get("geometry") or {}).get("location") or {}
    lat = location.get("lat")
    lng = location.get("lng")
    if not place_id or lat is None or lng is None:
        return None

    types = raw.get("types")
    return PlaceResult(
        place_id=place_id,
        name=raw.get("name") or "",
        lat=lat,
        lng=lng,
        rating=raw.get("rating"),
        user_ratings_total=raw.get("user_ratings_total"),
        types=list(types) if types else None,
    )


class GooglePlacesFetcher:
    """Google Places (legacy JSON API) client.

    Attributes:
        _api_key: Places API key; checked on every call, not at construction.
        _timeout: Per-request timeout in seconds.
        _max_retries: Extra attempts after a transport failure or timeout.
        _isolate_category_failures: When True, a failing category is logged
            and skipped instead of failing the whole lookup.
    """

    NEARBY_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"
    DETAILS_URL = "https://maps.googleapis.com/maps/api/place/details/json"

    HEADERS = {"Accept": "application/json"}

    def __init__(
        self,
        api_key: str | None,
        timeout: float = 5.0,
        max_retries: int = 0,
        isolate_category_failures: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._timeout = timeout
        self._max_retries = max_retries
        self._isolate_category_failures = isolate_category_failures
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers=self.HEADERS,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _require_key(self) -> str:
        if not self._api_key:
            raise ConfigurationError("GOOGLE_PLACES_API_KEY is not set")
        return self._api_key

    async def _get_json(self, url: str, params: dict[str, str], label: str) -> dict:
        """GET ``url`` and decode the JSON body.

        Timeouts and connection failures are retried up to ``_max_retries``
        times; everything else fails immediately.
        """
        client = self._get_client()
        for attempt in range(self._max_retries + 1):
            try:
                response = await client.get(url, params=params)
                response.raise_for_status()
                return response.json()
            except (httpx.TimeoutException, httpx.TransportError) as e:
                if attempt < self._max_retries:
                    logger.info(
                        f"[PLACES] Retry {attempt + 1}/{self._max_retries} for {label}: "
                        f"{type(e).__name__}"
                    )
                    continue
                raise UpstreamProviderError(
                    f"Places request failed for {label}: {type(e).__name__}: {e}"
                ) from e
            except httpx.HTTPStatusError as e:
                raise UpstreamProviderError(
                    f"Places request for {label} returned HTTP {e.response.status_code}"
                ) from e
            except ValueError as e:
                raise UpstreamProviderError(
                    f"Places response for {label} is not valid JSON"
                ) from e
        # Unreachable: the loop always returns or raises
        raise UpstreamProviderError(f"Places request failed for {label}")

    async def fetch_nearby(
        self,
        lat: float,
        lng: float,
        radius_meters: int,
        category: str,
    ) -> list[PlaceResult]:
        """Query Nearby Search for one category.

        Args:
            lat: Center latitude.
            lng: Center longitude.
            radius_meters: Search radius.
            category: Provider place type, e.g. ``"park"``.

        Returns:
            Normalized places in provider order. Empty for ZERO_RESULTS.

        Raises:
            ConfigurationError: If no API key is configured.
            UpstreamProviderError: On transport failure, timeout or a
                non-success provider status.
        """
        key = self._require_key()
        params = {
            "location": f"{lat},{lng}",
            "radius": str(radius_meters),
            "type": category,
            "key": key,
        }
        data = await self._get_json(self.NEARBY_SEARCH_URL, params, category)

        status = data.get("status")
        if status not in SUCCESS_STATUSES:
            message = data.get("error_message") or status or "Unknown places error"
            logger.error(f"[PLACES] Nearby search for {category} failed: {message}")
            raise UpstreamProviderError(message, status=status, category=category)

        places: list[PlaceResult] = []
        for raw in data.get("results") or []:
            place = normalize_place(raw)
            if place is None:
                logger.debug(f"[PLACES] Skipping incomplete record in {category}: {raw!r}")
                continue
            places.append(place)
        return places

    async def fetch_categories(
        self,
        lat: float,
        lng: float,
        radius_meters: int,
        categories: Iterable[str],
        limit: int,
    ) -> list[PlaceResult]:
        """Fetch every category in parallel and merge the results.

        Merging happens after all requests complete, in the order the
        categories were given. By default any failing category fails the
        whole lookup.
        """
        categories = list(categories)
        results = await asyncio.gather(
            *(self.fetch_nearby(lat, lng, radius_meters, c) for c in categories),
            return_exceptions=True,
        )

        batches: list[list[PlaceResult]] = []
        failures: list[BaseException] = []
        for category, result in zip(categories, results):
            if isinstance(result, BaseException):
                # Configuration errors and cancellation are never isolated
                if not self._isolate_category_failures or not isinstance(
                    result, UpstreamProviderError
                ):
                    raise result
                logger.warning(f"[PLACES] Skipping category {category}: {result}")
                failures.append(result)
                continue
            batches.append(result)

        if failures and not batches:
            raise failures[0]

        merged = merge_places([], *batches, limit=limit)
        logger.info(
            f"[PLACES] {len(merged)} places for ({lat:.4f}, {lng:.4f}) r={radius_meters} "
            f"from {len(batches)}/{len(categories)} categories"
        )
        return merged

    async def fetch_place_details(self, place_id: str) -> PlaceDetails:
        """Look up extended details for one place.

        Raises:
            ValueError: If ``place_id`` is empty.
            ConfigurationError: If no API key is configured.
            UpstreamProviderError: On transport failure or a non-success status.
        """
        if not place_id:
            raise ValueError("place_id cannot be empty")
        key = self._require_key()
        params = {
            "place_id": place_id,
            "fields": ",".join(DETAILS_FIELDS),
            "key": key,
        }
        data = await self._get_json(self.DETAILS_URL, params, f"details {place_id}")

        status = data.get("status")
        if status not in SUCCESS_STATUSES:
            message = data.get("error_message") or status or "Unknown places error"
            raise UpstreamProviderError(message, status=status)

        result = data.get("result") or {}
        opening_hours = result.get("opening_hours") or {}
        return PlaceDetails(
            name=result.get("name"),
            formatted_address=result.get("formatted_address"),
            rating=result.get("rating"),
            user_ratings_total=result.get("user_ratings_total"),
            wheelchair_accessible_entrance=result.get("wheelchair_accessible_entrance"),
            business_status=result.get("business_status"),
            open_now=opening_hours.get("open_now"),
            types=result.get("types"),
        )
