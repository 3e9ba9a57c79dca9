"""Queue tasks for the place statistics recompute.

This module implements:
    - recompute_place_statistics_task: Recompute and store statistics
    - scheduled_recompute_task: Cron wrapper for the daily run
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog

from depot_stats.errors.exceptions import ConfigurationError, StoreError
from depot_stats.services.statistics.batch import run_batch
from depot_stats.services.store.base import PlaceStore
from depot_stats.services.store.sql_store import SqlPlaceStore

logger = structlog.get_logger(__name__)


def _get_store(ctx: Dict[str, Any]) -> PlaceStore:
    """Return the store prepared by worker startup, or a fresh SQL store."""
    store = ctx.get("store") if ctx else None
    return store if store is not None else SqlPlaceStore()


async def recompute_place_statistics_task(
    ctx: Dict[str, Any],
    task_id: Optional[str] = None,
    place_ids: Optional[List[str]] = None,
    dry_run: bool = False,
    **kwargs
) -> Dict[str, Any]:
    """Recompute cached statistics for all places (or the given ones).

    Args:
        ctx: Worker context (may contain a "store" set by worker startup)
        task_id: Task identifier for logging (generated if missing)
        place_ids: Restrict the run to these place ids
        dry_run: Compute without writing

    Returns:
        Dictionary with task results and metrics:
            - task_id: Task identifier
            - status: "success", "partial_success" or "error"
            - places_total / places_updated / places_skipped / places_failed
            - fields_written: Number of stored values
            - duration_seconds: Run duration
            - error: Present when the run aborted
    """
    task_id = task_id or f"recompute-{int(datetime.now(timezone.utc).timestamp())}"
    log = logger.bind(task_id=task_id, dry_run=dry_run)
    log.info(
        "recompute_place_statistics_task_started",
        place_count=len(place_ids) if place_ids else None,
    )

    try:
        result = await run_batch(
            _get_store(ctx),
            place_ids=place_ids or None,
            dry_run=dry_run,
        )
    except (StoreError, ConfigurationError) as e:
        log.error(
            "recompute_place_statistics_task_failed",
            error=e.message,
            error_type=type(e).__name__,
        )
        return {
            "task_id": task_id,
            "status": "error",
            "error": e.message,
        }

    log.info("recompute_place_statistics_task_completed", status=result.status)
    return {"task_id": task_id, **result.to_dict()}


async def scheduled_recompute_task(
    ctx: Dict[str, Any],
    **kwargs
) -> Dict[str, Any]:
    """Cron wrapper for the daily recompute of all places."""
    task_id = f"recompute-scheduled-{int(datetime.now(timezone.utc).timestamp())}"

    logger.info("scheduled_recompute_task_started", task_id=task_id)

    return await recompute_place_statistics_task(ctx=ctx, task_id=task_id)
