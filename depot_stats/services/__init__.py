"""Business logic services.

Available Services:
    - statistics: Aggregation, batch recompute and display helpers
    - store: Place/unit store interface and implementations
"""
from depot_stats.services.statistics import (
    compute_full_statistics,
    run_batch,
    BatchResult,
)
from depot_stats.services.store import (
    PlaceStore,
    InMemoryPlaceStore,
    SqlPlaceStore,
)

__all__: list[str] = [
    "compute_full_statistics",
    "run_batch",
    "BatchResult",
    "PlaceStore",
    "InMemoryPlaceStore",
    "SqlPlaceStore",
]
