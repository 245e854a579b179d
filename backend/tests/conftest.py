"""Shared fixtures: place factories and a stubbed Google Places provider."""

from typing import Any

import pytest

from hotspots.models import PlaceResult
from hotspots.services import GooglePlacesFetcher

from tests.helpers import NYC, PlacesProviderStub, build_raw_place


@pytest.fixture
def make_place():
    def _make(
        place_id: str,
        name: str | None = None,
        lat: float = NYC[0],
        lng: float = NYC[1],
        **kwargs: Any,
    ) -> PlaceResult:
        return PlaceResult(place_id=place_id, name=name or place_id, lat=lat, lng=lng, **kwargs)

    return _make


@pytest.fixture
def provider() -> PlacesProviderStub:
    return PlacesProviderStub()


@pytest.fixture
def fetcher(provider: PlacesProviderStub) -> GooglePlacesFetcher:
    return GooglePlacesFetcher(api_key="test-key", transport=provider.transport)


@pytest.fixture
def scenario_provider(provider: PlacesProviderStub) -> PlacesProviderStub:
    """20 attractions, 15 parks (5 shared with attractions), 10 other POIs."""
    provider.results["tourist_attraction"] = [
        build_raw_place(f"ta-{i}", rating=4.5, user_ratings_total=100 + i, types=["tourist_attraction"])
        for i in range(20)
    ]
    provider.results["park"] = [
        build_raw_place(f"ta-{i}", types=["park", "tourist_attraction"]) for i in range(5)
    ] + [build_raw_place(f"park-{i}", types=["park"]) for i in range(10)]
    provider.results["point_of_interest"] = [
        build_raw_place(f"poi-{i}") for i in range(10)
    ]
    return provider
