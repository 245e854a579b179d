"""Test helpers: raw provider records and a stubbed Google Places API."""

import asyncio
from typing import Any

import httpx

NYC = (40.758, -73.9855)


def build_raw_place(
    place_id: str,
    name: str | None = None,
    lat: float = NYC[0],
    lng: float = NYC[1],
    **extra: Any,
) -> dict:
    """A Nearby Search result record as the provider returns it."""
    return {
        "place_id": place_id,
        "name": name or place_id,
        "geometry": {"location": {"lat": lat, "lng": lng}},
        **extra,
    }


class PlacesProviderStub:
    """Stands in for the Google Places JSON API through httpx.MockTransport.

    Attributes:
        results: Nearby Search records per category (``type`` param).
        failures: Per category, either a provider status string such as
            ``"REQUEST_DENIED"`` or an exception to raise from the transport.
        details: Place Details ``result`` objects per place_id.
        delays: Optional per-category delay in seconds before responding.
    """

    def __init__(self) -> None:
        self.results: dict[str, list[dict]] = {}
        self.failures: dict[str, Any] = {}
        self.details: dict[str, dict] = {}
        self.delays: dict[str, float] = {}
        self.requests: list[httpx.Request] = []

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        params = request.url.params

        if request.url.path.endswith("/details/json"):
            place_id = params.get("place_id")
            if place_id not in self.details:
                return httpx.Response(200, json={"status": "NOT_FOUND"})
            return httpx.Response(200, json={"status": "OK", "result": self.details[place_id]})

        category = params.get("type")
        if category in self.delays:
            await asyncio.sleep(self.delays[category])

        failure = self.failures.get(category)
        if isinstance(failure, Exception):
            raise failure
        if isinstance(failure, str):
            return httpx.Response(
                200,
                json={"status": failure, "error_message": f"{failure} for {category}"},
            )

        results = self.results.get(category, [])
        status = "OK" if results else "ZERO_RESULTS"
        return httpx.Response(200, json={"status": status, "results": results})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls_for(self, category: str) -> int:
        return sum(1 for r in self.requests if r.url.params.get("type") == category)
