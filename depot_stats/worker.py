"""arq worker configuration for the statistics recompute.

This module configures the arq worker with:
    - recompute_place_statistics_task: On-demand recompute (all or some places)
    - scheduled_recompute_task: Daily cron recompute of all places

Run with: `arq depot_stats.worker.WorkerSettings`
"""
from typing import Any, Dict, List

import structlog
from arq import cron
from arq.connections import RedisSettings
from arq.cron import CronJob

from depot_stats.config import settings, configure_logging
from depot_stats.db.base import dispose_engine
from depot_stats.services.store.sql_store import SqlPlaceStore
from depot_stats.tasks.statistics_tasks import (
    recompute_place_statistics_task,
    scheduled_recompute_task,
)

configure_logging()
logger = structlog.get_logger(__name__)


async def startup(ctx: Dict[str, Any]) -> None:
    """Prepare the shared store for all jobs of this worker."""
    ctx["store"] = SqlPlaceStore()
    logger.info(
        "worker_started",
        queue_name=settings.queue_name,
        recompute_enabled=settings.recompute_enabled,
    )


async def shutdown(ctx: Dict[str, Any]) -> None:
    """Release database connections."""
    ctx.pop("store", None)
    await dispose_engine()
    logger.info("worker_stopped")


def build_cron_jobs() -> List[CronJob]:
    """Cron jobs for the current settings.

    With RECOMPUTE_ENABLED=false no trigger is registered at all, which is
    how the daily recompute is switched off.
    """
    if not settings.recompute_enabled:
        return []
    return [
        cron(
            scheduled_recompute_task,
            hour=settings.recompute_hour,
            minute=settings.recompute_minute,
            unique=True,
            run_at_startup=False,
        ),
    ]


class WorkerSettings:
    """arq worker configuration settings.

    Registered Tasks:
        - recompute_place_statistics_task

    Cron Jobs:
        - scheduled_recompute_task: Daily at RECOMPUTE_HOUR:RECOMPUTE_MINUTE UTC
    """

    redis_settings = RedisSettings.from_dsn(settings.redis_url)
    queue_name = settings.queue_name
    max_jobs = 1  # One batch pass at a time
    job_timeout = settings.job_timeout
    keep_result = 3600
    max_tries = 1

    functions = [
        recompute_place_statistics_task,
    ]

    on_startup = startup
    on_shutdown = shutdown

    cron_jobs = build_cron_jobs()
