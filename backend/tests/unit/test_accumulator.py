"""Unit tests for HotspotAccumulator."""

import asyncio

import pytest

from hotspots.client import MAX_HOTSPOTS, HotspotAccumulator
from hotspots.models import BoundingBox, PlaceResult

from tests.helpers import NYC


def box_around(lat: float, lng: float, half: float = 0.001) -> BoundingBox:
    return BoundingBox(north=lat + half, south=lat - half, east=lng + half, west=lng - half)


def place(place_id: str, lat: float = NYC[0], lng: float = NYC[1], **kwargs) -> PlaceResult:
    return PlaceResult(place_id=place_id, name=place_id, lat=lat, lng=lng, **kwargs)


class FakeFetch:
    """Records calls and returns queued batches (or raises queued errors)."""

    def __init__(self, *batches) -> None:
        self.batches = list(batches)
        self.calls: list[tuple[float, float, int]] = []

    async def __call__(self, lat: float, lng: float, radius_meters: int) -> list[PlaceResult]:
        self.calls.append((lat, lng, radius_meters))
        batch = self.batches.pop(0) if self.batches else []
        if isinstance(batch, Exception):
            raise batch
        return batch


class SlowFetch(FakeFetch):
    """FakeFetch that yields to the event loop before answering."""

    async def __call__(self, lat: float, lng: float, radius_meters: int) -> list[PlaceResult]:
        await asyncio.sleep(0.01)
        return await super().__call__(lat, lng, radius_meters)


class TestViewportIdle:
    """Tests for grid-cell deduplication on map idle."""

    @pytest.mark.asyncio
    async def test_same_cell_fetches_once(self) -> None:
        fetch = FakeFetch([place("a")])
        acc = HotspotAccumulator(fetch)

        assert await acc.on_viewport_idle(box_around(40.7581, -73.9852)) is True
        assert await acc.on_viewport_idle(box_around(40.7584, -73.9849)) is False

        assert len(fetch.calls) == 1
        lat, lng, radius = fetch.calls[0]
        assert (lat, lng) == (40.758, -73.985)
        assert radius == 1609

    @pytest.mark.asyncio
    async def test_overlapping_idle_events_fetch_once(self) -> None:
        fetch = SlowFetch([place("a")])
        acc = HotspotAccumulator(fetch)
        bounds = box_around(40.758, -73.986)

        results = await asyncio.gather(acc.on_viewport_idle(bounds), acc.on_viewport_idle(bounds))

        assert sorted(results) == [False, True]
        assert fetch.calls == [(40.758, -73.986, 1609)]
        assert [p.place_id for p in acc.hotspots] == ["a"]

    @pytest.mark.asyncio
    async def test_cell_retried_after_overlapping_failure(self) -> None:
        fetch = SlowFetch(RuntimeError("offline"), [place("a")])
        acc = HotspotAccumulator(fetch)
        bounds = box_around(40.758, -73.986)

        await asyncio.gather(acc.on_viewport_idle(bounds), acc.on_viewport_idle(bounds))
        assert len(fetch.calls) == 1
        assert acc.last_fetched_center is None

        assert await acc.on_viewport_idle(bounds) is True
        assert len(fetch.calls) == 2

    @pytest.mark.asyncio
    async def test_new_cell_fetches(self) -> None:
        fetch = FakeFetch([place("a")], [place("b")])
        acc = HotspotAccumulator(fetch)

        await acc.on_viewport_idle(box_around(40.758, -73.985))
        await acc.on_viewport_idle(box_around(40.762, -73.985))

        assert len(fetch.calls) == 2
        assert [p.place_id for p in acc.hotspots] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_idle_after_player_move_in_same_cell_is_skipped(self) -> None:
        fetch = FakeFetch([place("a")])
        acc = HotspotAccumulator(fetch)

        await acc.on_player_moved(40.7581, -73.9852)
        assert await acc.on_viewport_idle(box_around(40.7583, -73.9851)) is False
        assert len(fetch.calls) == 1

    @pytest.mark.asyncio
    async def test_failed_idle_fetch_does_not_record_center(self) -> None:
        fetch = FakeFetch(RuntimeError("offline"), [place("a")])
        acc = HotspotAccumulator(fetch)
        bounds = box_around(40.758, -73.985)

        assert await acc.on_viewport_idle(bounds) is False
        assert acc.last_fetched_center is None
        assert await acc.on_viewport_idle(bounds) is True
        assert len(fetch.calls) == 2


class TestPlayerMoved:
    """Tests for player-position fetches."""

    @pytest.mark.asyncio
    async def test_always_fetches_at_exact_position(self) -> None:
        fetch = FakeFetch()
        acc = HotspotAccumulator(fetch)

        await acc.on_player_moved(40.75812, -73.98523)
        await acc.on_player_moved(40.75812, -73.98523)

        assert fetch.calls == [(40.75812, -73.98523, 1609)] * 2
        assert (acc.last_fetched_center.lat, acc.last_fetched_center.lng) == (40.758, -73.985)

    @pytest.mark.asyncio
    async def test_failure_keeps_set_by_default(self) -> None:
        fetch = FakeFetch([place("a"), place("b")], RuntimeError("offline"))
        acc = HotspotAccumulator(fetch)

        await acc.on_player_moved(*NYC)
        assert await acc.on_player_moved(*NYC) is False

        assert [p.place_id for p in acc.hotspots] == ["a", "b"]
        assert acc.last_error is not None

    @pytest.mark.asyncio
    async def test_clear_on_position_error(self) -> None:
        fetch = FakeFetch([place("a")], RuntimeError("offline"))
        acc = HotspotAccumulator(fetch, clear_on_position_error=True)

        await acc.on_player_moved(*NYC)
        await acc.on_player_moved(*NYC)

        assert acc.hotspots == []

    @pytest.mark.asyncio
    async def test_viewport_failure_never_clears(self) -> None:
        fetch = FakeFetch([place("a")], RuntimeError("offline"))
        acc = HotspotAccumulator(fetch, clear_on_position_error=True)

        await acc.on_player_moved(*NYC)
        await acc.on_viewport_idle(box_around(40.770, -73.985))

        assert [p.place_id for p in acc.hotspots] == ["a"]

    @pytest.mark.asyncio
    async def test_success_clears_last_error(self) -> None:
        fetch = FakeFetch(RuntimeError("offline"), [place("a")])
        acc = HotspotAccumulator(fetch)

        await acc.on_player_moved(*NYC)
        assert acc.last_error is not None
        await acc.on_player_moved(*NYC)
        assert acc.last_error is None


class TestAccumulation:
    """Tests for merge behaviour across batches."""

    @pytest.mark.asyncio
    async def test_repeat_batch_is_idempotent(self) -> None:
        batch = [place("a"), place("b")]
        fetch = FakeFetch(batch, list(batch))
        acc = HotspotAccumulator(fetch)

        await acc.on_player_moved(*NYC)
        first = acc.hotspots
        await acc.on_player_moved(*NYC)

        assert acc.hotspots == first

    @pytest.mark.asyncio
    async def test_refreshed_entry_keeps_position(self) -> None:
        fetch = FakeFetch([place("a"), place("b")], [place("c"), place("a", rating=4.9)])
        acc = HotspotAccumulator(fetch)

        await acc.on_player_moved(*NYC)
        await acc.on_player_moved(*NYC)

        assert [p.place_id for p in acc.hotspots] == ["a", "b", "c"]
        assert acc.hotspots[0].rating == 4.9

    @pytest.mark.asyncio
    async def test_cap(self) -> None:
        first = [place(f"a-{i}") for i in range(150)]
        second = [place(f"b-{i}") for i in range(150)]
        fetch = FakeFetch(first, second)
        acc = HotspotAccumulator(fetch)

        await acc.on_player_moved(*NYC)
        await acc.on_player_moved(*NYC)

        assert len(acc.hotspots) == MAX_HOTSPOTS
        assert acc.hotspots[:150] == first
        assert acc.hotspots[-1].place_id == "b-49"

    @pytest.mark.asyncio
    async def test_hotspots_returns_copy(self) -> None:
        acc = HotspotAccumulator(FakeFetch([place("a")]))
        await acc.on_player_moved(*NYC)

        acc.hotspots.clear()
        assert len(acc.hotspots) == 1


class TestQueries:
    """Tests for proximity and area queries over the accumulated set."""

    @pytest.mark.asyncio
    async def test_nearby_sorted_by_distance(self) -> None:
        lat, lng = NYC
        batch = [
            place("far", lat + 0.001, lng),
            place("close", lat + 0.0001, lng),
            place("mid", lat + 0.0004, lng),
        ]
        acc = HotspotAccumulator(FakeFetch(batch))
        await acc.on_player_moved(lat, lng)

        assert [p.place_id for p in acc.nearby(lat, lng)] == ["close", "mid"]

    @pytest.mark.asyncio
    async def test_in_area(self) -> None:
        lat, lng = NYC
        batch = [place("inside", lat + 0.005, lng), place("outside", lat + 0.05, lng)]
        acc = HotspotAccumulator(FakeFetch(batch))
        await acc.on_player_moved(lat, lng)

        assert [p.place_id for p in acc.in_area(lat, lng)] == ["inside"]
