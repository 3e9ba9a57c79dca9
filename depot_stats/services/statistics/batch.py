"""Batch recompute of cached place statistics.

This module walks every place in the store, recomputes its statistics with
the calculator and writes each named value back individually.

Policies:
    - A place without unit records is skipped, so its previously stored
      values are kept rather than overwritten with zeros.
    - Every store call runs under a timeout and a bounded retry. A place
      whose calls still fail is logged and counted, and the loop moves on.
    - There is no transaction across places or across the fields of one
      place; an interrupted run leaves a mix of fresh and stale places.
"""
import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from depot_stats.config import settings
from depot_stats.errors.exceptions import ConfigurationError, StoreUnavailableError
from depot_stats.models.statistics import (
    BucketDefinition,
    PlaceId,
    PlaceStatistics,
    stat_field_names,
)
from depot_stats.services.statistics.calculator import compute_full_statistics
from depot_stats.services.store.base import PlaceStore

logger = structlog.get_logger(__name__)


@dataclass
class BatchResult:
    """Metrics collected during one recompute run.

    ``places_updated`` counts places whose statistics were produced: written
    to the store, or only computed when running dry.
    """
    places_total: int = 0
    places_updated: int = 0
    places_skipped: int = 0
    places_failed: int = 0
    fields_written: int = 0
    duration_seconds: float = 0.0
    dry_run: bool = False
    failed_place_ids: List[str] = field(default_factory=list)
    statistics: Dict[str, PlaceStatistics] = field(default_factory=dict)

    @property
    def status(self) -> str:
        """success, partial_success (some places failed) or error (all failed)."""
        if self.places_failed == 0:
            return "success"
        if self.places_failed < self.places_total:
            return "partial_success"
        return "error"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/response."""
        data: Dict[str, Any] = {
            "status": self.status,
            "places_total": self.places_total,
            "places_updated": self.places_updated,
            "places_skipped": self.places_skipped,
            "places_failed": self.places_failed,
            "fields_written": self.fields_written,
            "duration_seconds": round(self.duration_seconds, 3),
            "dry_run": self.dry_run,
            "failed_place_ids": list(self.failed_place_ids),
        }
        if self.dry_run:
            data["statistics"] = {
                place_id: {name: str(value) for name, value in values.items()}
                for place_id, values in self.statistics.items()
            }
        return data


async def call_store(
    operation: str,
    func: Callable[..., Awaitable[Any]],
    *args: Any,
    max_attempts: int,
    timeout_seconds: float,
    retry_wait_seconds: float,
) -> Any:
    """Await a store call with a timeout and bounded exponential-backoff retry.

    Only StoreUnavailableError and timeouts are retried; anything else
    propagates on the first attempt.

    Raises:
        StoreUnavailableError: If every attempt failed or timed out
    """
    def _log_retry(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "store_call_retry",
            operation=operation,
            attempt=retry_state.attempt_number,
            max_attempts=max_attempts,
            error=str(error) or type(error).__name__,
        )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=retry_wait_seconds, max=retry_wait_seconds * 10),
        retry=retry_if_exception_type((StoreUnavailableError, asyncio.TimeoutError)),
        before_sleep=_log_retry,
        reraise=True,
    )

    try:
        async for attempt in retrying:
            with attempt:
                result = await asyncio.wait_for(func(*args), timeout=timeout_seconds)
    except asyncio.TimeoutError as e:
        raise StoreUnavailableError(
            f"{operation} timed out after {max_attempts} attempt(s) of {timeout_seconds}s"
        ) from e
    return result


async def run_batch(
    store: PlaceStore,
    buckets: Optional[Sequence[BucketDefinition]] = None,
    place_ids: Optional[Sequence[PlaceId]] = None,
    dry_run: bool = False,
    max_attempts: Optional[int] = None,
    timeout_seconds: Optional[float] = None,
    retry_wait_seconds: Optional[float] = None,
) -> BatchResult:
    """Recompute and store statistics for every place.

    Args:
        store: Place/unit store to read units from and write statistics to
        buckets: Bucket catalog (default: the store's catalog; the standard
            catalog gives 21 fields per place)
        place_ids: Restrict the run to these places instead of all places
        dry_run: Compute without writing; results land in BatchResult.statistics
        max_attempts: Attempts per store call (default: settings.store_max_attempts)
        timeout_seconds: Timeout per store call (default: settings.store_timeout_seconds)
        retry_wait_seconds: Backoff multiplier (default: settings.store_retry_wait_seconds)

    Returns:
        BatchResult with per-run metrics

    Raises:
        ConfigurationError: If the bucket catalog is empty, or produces fields
            the store does not accept on a writing run
        StoreUnavailableError: If the place list itself cannot be fetched
        StoreError: If the store rejects the place list query
    """
    buckets = tuple(store.buckets if buckets is None else buckets)
    if not buckets:
        raise ConfigurationError("Bucket catalog cannot be empty")
    unaccepted = [name for name in stat_field_names(buckets) if name not in store.stat_field_names]
    if unaccepted and not dry_run:
        raise ConfigurationError(
            f"Store does not accept {len(unaccepted)} field(s) of the bucket catalog: "
            f"{', '.join(unaccepted)}"
        )

    guard = {
        "max_attempts": max_attempts or settings.store_max_attempts,
        "timeout_seconds": timeout_seconds or settings.store_timeout_seconds,
        "retry_wait_seconds": (
            settings.store_retry_wait_seconds if retry_wait_seconds is None else retry_wait_seconds
        ),
    }

    start_time = time.monotonic()
    result = BatchResult(dry_run=dry_run)
    log = logger.bind(dry_run=dry_run, bucket_count=len(buckets))

    if place_ids is None:
        place_ids = await call_store("list_place_ids", store.list_place_ids, **guard)
    place_ids = list(place_ids)
    result.places_total = len(place_ids)

    log.info("batch_started", places_total=result.places_total)

    for position, place_id in enumerate(place_ids, start=1):
        place_log = log.bind(place_id=str(place_id), position=position)
        try:
            records = await call_store(
                "get_units_for_place", store.get_units_for_place, place_id, **guard
            )
            if not records:
                result.places_skipped += 1
                place_log.info("place_skipped_no_units")
                continue

            statistics = compute_full_statistics(records, buckets)

            if dry_run:
                result.statistics[str(place_id)] = statistics
            else:
                rejected = []
                for field_name, value in statistics.items():
                    written = await call_store(
                        "set_stat_field", store.set_stat_field, place_id, field_name, value, **guard
                    )
                    if written:
                        result.fields_written += 1
                    else:
                        rejected.append(field_name)
                if rejected:
                    raise StoreUnavailableError(
                        f"Store rejected {len(rejected)} field(s): {', '.join(rejected)}"
                    )

            result.places_updated += 1
            place_log.info(
                "place_statistics_updated",
                unit_count=len(records),
                field_count=len(statistics),
            )

        except Exception as e:
            result.places_failed += 1
            result.failed_place_ids.append(str(place_id))
            place_log.error(
                "place_statistics_failed",
                error=str(e),
                error_type=type(e).__name__,
            )

    result.duration_seconds = time.monotonic() - start_time

    log.info(
        "batch_completed",
        status=result.status,
        places_total=result.places_total,
        places_updated=result.places_updated,
        places_skipped=result.places_skipped,
        places_failed=result.places_failed,
        fields_written=result.fields_written,
        duration_seconds=round(result.duration_seconds, 3),
    )
    return result
