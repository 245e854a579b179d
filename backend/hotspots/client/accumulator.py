"""Session-level hotspot accumulation for the map.

Keeps the running, deduplicated set of hotspots discovered while the player
moves and pans the map:

- Player position change (including the initial load) always fetches at the
  exact position and records the quantized center.
- Map idle at a new viewport center fetches at the quantized center, unless
  that grid cell is the one fetched last.

Each successful batch is merged with ``merge_places``, so the set only grows
(up to ``max_hotspots``) or refreshes entries in place. A failed fetch keeps
the existing set and records an advisory message in ``last_error``.
"""

import logging
from typing import Awaitable, Callable

from hotspots.models import CLIENT_GRID_PRECISION, BoundingBox, PlaceResult, QueryKey
from hotspots.utils.geo import (
    BOUNDING_RADIUS_METERS,
    PROXIMITY_METERS,
    bounding_box,
    is_within,
    sort_by_distance,
)
from hotspots.utils.merge import merge_places

logger = logging.getLogger(__name__)

MAX_HOTSPOTS = 200  # keeps the marker layer responsive

FetchPlaces = Callable[[float, float, int], Awaitable[list[PlaceResult]]]


class HotspotAccumulator:
    """Running hotspot set for one map session.

    Args:
        fetch_places: Async callable ``(lat, lng, radius_meters)`` returning
            places, normally ``HotspotsClient.get_places``.
        radius_meters: Search radius used for every fetch.
        max_hotspots: Cap on the accumulated set.
        grid_precision: Decimal places for "same area" detection.
        clear_on_position_error: Reproduce the legacy behaviour of
            emptying the set when a player-position fetch fails. Viewport
            fetch failures always keep the set. Off by default.
    """

    def __init__(
        self,
        fetch_places: FetchPlaces,
        radius_meters: int = BOUNDING_RADIUS_METERS,
        max_hotspots: int = MAX_HOTSPOTS,
        grid_precision: int = CLIENT_GRID_PRECISION,
        clear_on_position_error: bool = False,
    ) -> None:
        self._fetch_places = fetch_places
        self._radius_meters = radius_meters
        self._max_hotspots = max_hotspots
        self._grid_precision = grid_precision
        self._clear_on_position_error = clear_on_position_error

        self._hotspots: list[PlaceResult] = []
        self._last_fetched_center: QueryKey | None = None
        self._pending_center: QueryKey | None = None
        self.last_error: str | None = None
        self.fetch_count = 0

    @property
    def hotspots(self) -> list[PlaceResult]:
        return list(self._hotspots)

    @property
    def last_fetched_center(self) -> QueryKey | None:
        return self._last_fetched_center

    def _grid_key(self, lat: float, lng: float) -> QueryKey:
        return QueryKey.from_coordinates(
            lat, lng, self._radius_meters, precision=self._grid_precision
        )

    async def _fetch_and_merge(
        self, lat: float, lng: float, clear_on_error: bool = False
    ) -> bool:
        self.fetch_count += 1
        try:
            places = await self._fetch_places(lat, lng, self._radius_meters)
        except Exception as e:
            logger.warning(f"[HOTSPOTS] Fetch at ({lat:.4f}, {lng:.4f}) failed: {e}")
            self.last_error = "Couldn't load nearby hotspots. Showing what we already found."
            if clear_on_error:
                self._hotspots = []
            return False

        self._hotspots = merge_places(self._hotspots, places, limit=self._max_hotspots)
        self.last_error = None
        logger.debug(f"[HOTSPOTS] {len(places)} fetched, {len(self._hotspots)} accumulated")
        return True

    async def on_player_moved(self, lat: float, lng: float) -> bool:
        """Fetch around the player's new position and merge.

        Always fetches. Returns True if the fetch succeeded.
        """
        self._last_fetched_center = self._grid_key(lat, lng)
        return await self._fetch_and_merge(
            lat, lng, clear_on_error=self._clear_on_position_error
        )

    async def on_viewport_idle(self, bounds: BoundingBox) -> bool:
        """Fetch around the viewport center if it is a new grid cell.

        A cell already being fetched is skipped as well, so overlapping idle
        events for one cell make a single request.

        Returns True if a fetch was made and succeeded, False if it was
        skipped or failed.
        """
        center_lat, center_lng = bounds.center
        key = self._grid_key(center_lat, center_lng)
        if key in (self._last_fetched_center, self._pending_center):
            return False

        self._pending_center = key
        try:
            ok = await self._fetch_and_merge(key.lat, key.lng)
        finally:
            if self._pending_center == key:
                self._pending_center = None
        if ok:
            self._last_fetched_center = key
        return ok

    def nearby(
        self, lat: float, lng: float, meters: float = PROXIMITY_METERS
    ) -> list[PlaceResult]:
        """Accumulated hotspots within ``meters`` of a point, nearest first."""
        close = [p for p in self._hotspots if is_within(lat, lng, p, meters)]
        return sort_by_distance(lat, lng, close)

    def in_area(self, lat: float, lng: float, radius_miles: float = 1.0) -> list[PlaceResult]:
        """Accumulated hotspots inside the bounding box around a point."""
        box = bounding_box(lat, lng, radius_miles)
        return [p for p in self._hotspots if box.contains(p.lat, p.lng)]
