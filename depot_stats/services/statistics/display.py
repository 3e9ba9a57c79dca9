"""Read-side helpers for showing place statistics.

Place identifiers are always passed in explicitly; nothing here depends on
request or page state.
"""
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

import structlog

from depot_stats.models.statistics import (
    STANDARD_BUCKETS,
    BucketDefinition,
    PlaceId,
    PlaceStatistics,
    UnitRecord,
)
from depot_stats.services.statistics.calculator import compute_full_statistics
from depot_stats.services.store.base import PlaceStore

logger = structlog.get_logger(__name__)


async def render_stat_field(store: PlaceStore, place_id: PlaceId, field_name: str) -> str:
    """Render one stored statistic of a place as plain text.

    Returns:
        The stored value as text, empty string when nothing is stored
    """
    value = await store.get_stat_field(place_id, field_name)
    return "" if value is None else str(value)


async def get_statistics_for_places(
    store: PlaceStore,
    place_ids: Iterable[PlaceId],
) -> Dict[PlaceId, Dict[str, Optional[Decimal]]]:
    """Collect stored statistics for a list of places.

    Places that have no stored value at all (never recomputed, or never had
    units) are left out of the result.
    """
    collected: Dict[PlaceId, Dict[str, Optional[Decimal]]] = {}
    for place_id in place_ids:
        values = await store.get_statistics(place_id)
        if any(value is not None for value in values.values()):
            collected[place_id] = values
    return collected


async def summarize_places(
    store: PlaceStore,
    place_ids: Iterable[PlaceId],
    buckets: Sequence[BucketDefinition] = STANDARD_BUCKETS,
) -> PlaceStatistics:
    """Compute statistics across the units of several places at once.

    Uses fresh unit records rather than the cached per-place values, since
    averages of averages would weight places instead of units.
    """
    records: List[UnitRecord] = []
    place_count = 0
    for place_id in place_ids:
        records.extend(await store.get_units_for_place(place_id))
        place_count += 1

    logger.debug("summarizing_places", place_count=place_count, unit_count=len(records))
    return compute_full_statistics(records, buckets)
