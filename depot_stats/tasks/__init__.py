"""Queue task definitions.

This module contains arq task functions for:
    - recompute_place_statistics_task: Recompute cached place statistics
    - scheduled_recompute_task: Cron wrapper for the daily recompute
"""
from depot_stats.tasks.statistics_tasks import (
    recompute_place_statistics_task,
    scheduled_recompute_task,
)

__all__ = [
    "recompute_place_statistics_task",
    "scheduled_recompute_task",
]
