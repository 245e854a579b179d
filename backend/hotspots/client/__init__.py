"""Client-side helpers: API client and the session hotspot accumulator."""

from .accumulator import MAX_HOTSPOTS, HotspotAccumulator
from .api import HotspotsClient, HotspotsClientError

__all__ = [
    "MAX_HOTSPOTS",
    "HotspotAccumulator",
    "HotspotsClient",
    "HotspotsClientError",
]
