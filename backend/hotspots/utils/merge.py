"""Deduplicating merge for place result lists.

Used both by the server (merging per-category provider responses) and by the
client accumulator (merging each new batch into the running hotspot set).

Semantics:
- Entries are keyed by ``place_id``.
- A later entry for an id already seen replaces its data but keeps the
  position of the first occurrence, so refreshed places do not reorder the
  list.
- The result is truncated to ``limit`` after merging. Once the cap is full,
  genuinely new places are dropped rather than evicting older ones.
"""

from typing import Iterable

from hotspots.models import PlaceResult


def merge_places(
    existing: Iterable[PlaceResult],
    *incoming: Iterable[PlaceResult],
    limit: int,
) -> list[PlaceResult]:
    """Merge place lists by id, preserving first-seen order, capped at ``limit``.

    Args:
        existing: Places already held, merged first.
        *incoming: Further lists merged in the given order.
        limit: Maximum number of places returned.

    Returns:
        A new list; the inputs are not modified.

    Example:
        >>> merge_places([a, b], [b2, c], limit=10)  # doctest: +SKIP
        [a, b2, c]
    """
    if limit <= 0:
        return []

    # dict keeps the original slot when an existing key is reassigned
    by_id: dict[str, PlaceResult] = {}
    for place in existing:
        by_id[place.place_id] = place
    for batch in incoming:
        for place in batch:
            by_id[place.place_id] = place

    return list(by_id.values())[:limit]
