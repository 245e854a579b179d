"""HTTP client for the hotspots API, used by the map session."""

import httpx

from hotspots.models import PlaceResult


class HotspotsClientError(Exception):
    """The places endpoint could not be reached or returned an error."""


class HotspotsClient:
    """Async client for ``GET /api/places``.

    Uses a shared httpx client created on first use.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def get_places(
        self, lat: float, lng: float, radius_meters: int
    ) -> list[PlaceResult]:
        """Fetch merged places around a point.

        Raises:
            HotspotsClientError: On transport failure, a non-JSON body, a
                non-2xx status or an ``error`` field in the response.
        """
        params = {"lat": lat, "lng": lng, "radiusMeters": radius_meters}
        try:
            response = await self._get_client().get("/api/places", params=params)
            data = response.json()
        except httpx.HTTPError as e:
            raise HotspotsClientError(f"Places request failed: {e}") from e
        except ValueError as e:
            raise HotspotsClientError("Places response is not valid JSON") from e

        if not isinstance(data, dict):
            raise HotspotsClientError("Places response has an unexpected shape")
        if data.get("error"):
            raise HotspotsClientError(str(data["error"]))
        if response.is_error:
            raise HotspotsClientError(f"Places request returned HTTP {response.status_code}")

        try:
            return [PlaceResult(**p) for p in data.get("places") or []]
        except (TypeError, ValueError) as e:
            raise HotspotsClientError(f"Invalid place in response: {e}") from e
