"""Command-line entry point for place statistics.

Usage:
    depot-stats recompute [--place-id ID ...] [--dry-run]
    depot-stats enqueue [--place-id ID ...] [--dry-run]
    depot-stats show PLACE_ID [--field NAME]
"""
import argparse
import asyncio
import sys
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from arq import ArqRedis
from arq.connections import RedisSettings, create_pool

from depot_stats.config import settings
from depot_stats.db.base import dispose_engine
from depot_stats.errors.exceptions import DepotStatsError
from depot_stats.models.statistics import STAT_FIELD_NAMES
from depot_stats.services.statistics.batch import BatchResult, run_batch
from depot_stats.services.statistics.display import render_stat_field
from depot_stats.services.store.sql_store import SqlPlaceStore


async def recompute(place_ids: Optional[List[str]], dry_run: bool) -> BatchResult:
    """Run the batch in-process against the configured database."""
    try:
        return await run_batch(SqlPlaceStore(), place_ids=place_ids or None, dry_run=dry_run)
    finally:
        await dispose_engine()


async def enqueue_recompute(task_id: str, place_ids: Optional[List[str]], dry_run: bool) -> Optional[str]:
    """Enqueue recompute_place_statistics_task on the worker queue.

    Returns:
        Enqueued job ID, None if an identical job is already queued
    """
    pool: ArqRedis = await create_pool(RedisSettings.from_dsn(settings.redis_url))
    try:
        job = await pool.enqueue_job(
            "recompute_place_statistics_task",
            task_id=task_id,
            place_ids=place_ids,
            dry_run=dry_run,
            _queue_name=settings.queue_name,
        )
        return job.job_id if job else None
    finally:
        await pool.close()


async def show(place_id: str, field_name: Optional[str]) -> List[str]:
    """Return display lines of stored statistics for one place."""
    store = SqlPlaceStore()
    try:
        if field_name:
            return [await render_stat_field(store, place_id, field_name)]
        values = await store.get_statistics(place_id)
        width = max(len(name) for name in STAT_FIELD_NAMES)
        return [
            f"{name.ljust(width)}  {'' if value is None else value}"
            for name, value in values.items()
        ]
    finally:
        await dispose_engine()


def print_summary(result: BatchResult) -> None:
    """Print a human readable run summary."""
    print("\n" + "=" * 60)
    print("PLACE STATISTICS RECOMPUTE")
    print("=" * 60)
    print(f"Status:          {result.status}")
    print(f"Dry Run:         {result.dry_run}")
    print(f"Places:          {result.places_total}")
    print(f"Updated:         {result.places_updated}")
    print(f"Skipped (empty): {result.places_skipped}")
    print(f"Failed:          {result.places_failed}")
    print(f"Fields Written:  {result.fields_written}")
    print(f"Elapsed Time:    {result.duration_seconds:.2f}s")
    if result.failed_place_ids:
        print(f"Failed Places:   {', '.join(result.failed_place_ids)}")
    for place_id, values in result.statistics.items():
        print(f"\n{place_id}")
        for name, value in values.items():
            print(f"  {name}: {value}")
    print("=" * 60 + "\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="depot-stats",
        description="Recompute and inspect cached place statistics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Recompute every place now
  depot-stats recompute

  # Preview two places without writing
  depot-stats recompute --place-id 3f6c... --place-id 9a1e... --dry-run

  # Hand the run to the worker
  depot-stats enqueue

  # Show one stored field
  depot-stats show 3f6c... --field "mini size average m2 price"
        """
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("recompute", "Run the recompute in this process"),
        ("enqueue", "Enqueue the recompute on the worker queue"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--place-id",
            dest="place_ids",
            action="append",
            help="Only process this place (repeatable)"
        )
        sub.add_argument(
            "--dry-run",
            action="store_true",
            help="Compute without writing"
        )
    subparsers.choices["enqueue"].add_argument(
        "--task-id",
        help="Task ID (auto-generated if not provided)"
    )

    show_parser = subparsers.add_parser("show", help="Print stored statistics of a place")
    show_parser.add_argument("place_id", help="Place identifier")
    show_parser.add_argument(
        "--field",
        choices=STAT_FIELD_NAMES,
        metavar="NAME",
        help="Print only this field"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        if args.command == "recompute":
            result = asyncio.run(recompute(args.place_ids, args.dry_run))
            print_summary(result)
            return 1 if result.status == "error" else 0

        if args.command == "enqueue":
            timestamp = int(datetime.now(timezone.utc).timestamp())
            task_id = args.task_id or f"recompute-manual-{timestamp}"
            job_id = asyncio.run(enqueue_recompute(task_id, args.place_ids, args.dry_run))
            if job_id is None:
                print(f"Task {task_id} is already queued")
            else:
                print("Task enqueued successfully!")
                print(f"   Task ID:  {task_id}")
                print(f"   Job ID:   {job_id}")
                print(f"   Queue:    {settings.queue_name}")
            return 0

        for line in asyncio.run(show(args.place_id, args.field)):
            print(line)
        return 0

    except DepotStatsError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
