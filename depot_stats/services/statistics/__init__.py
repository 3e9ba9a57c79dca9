"""Place statistics service.

This package computes and maintains cached statistics on places from their
storage units:
    - num of units / m2 / m3 available
    - average price, average m2 price and average m3 price per size bucket

Key Components:
    - compute_full_statistics: Core aggregation function
    - run_batch: Recompute and store statistics for all places
    - summarize_places: Aggregate over several places for display
"""
from depot_stats.services.statistics.calculator import (
    count_units,
    sum_dimension,
    average_price,
    compute_full_statistics,
    round_half_up,
)
from depot_stats.services.statistics.batch import (
    BatchResult,
    call_store,
    run_batch,
)
from depot_stats.services.statistics.display import (
    render_stat_field,
    get_statistics_for_places,
    summarize_places,
)

__all__ = [
    "count_units",
    "sum_dimension",
    "average_price",
    "compute_full_statistics",
    "round_half_up",
    "BatchResult",
    "call_store",
    "run_batch",
    "render_stat_field",
    "get_statistics_for_places",
    "summarize_places",
]
