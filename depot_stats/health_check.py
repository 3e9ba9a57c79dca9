"""Health check script for the statistics worker.

Verifies that the arq broker answers and that the place store is readable.
Exit code 0 means both are available.
"""
import sys
import asyncio
from typing import Optional

from redis.asyncio import Redis
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import create_async_engine

from depot_stats.config import settings
from depot_stats.db.models import Place


async def check_redis_connection() -> bool:
    """Check if the arq broker is reachable.

    Returns:
        True if Redis answers PING, False otherwise
    """
    try:
        redis = Redis.from_url(settings.redis_url, decode_responses=True)
        try:
            await redis.ping()
        finally:
            await redis.aclose()
        return True
    except Exception as e:
        print(f"Redis health check failed: {e}", file=sys.stderr)
        return False


async def count_places() -> Optional[int]:
    """Count places in the store using a short-lived engine.

    Returns:
        Number of places, or None if the store cannot be queried
    """
    try:
        engine = create_async_engine(settings.database_url, pool_pre_ping=True)
        try:
            async with engine.connect() as conn:
                result = await conn.execute(select(func.count(Place.id)))
                return int(result.scalar_one())
        finally:
            await engine.dispose()
    except Exception as e:
        print(f"Place store health check failed: {e}", file=sys.stderr)
        return None


async def main() -> int:
    """Run health checks and return exit code."""
    redis_ok = await check_redis_connection()
    place_count = await count_places()

    if not redis_ok:
        print("Health check failed: Redis connection unavailable", file=sys.stderr)
        return 1

    if place_count is None:
        print("Health check failed: place store unavailable", file=sys.stderr)
        return 1

    print(f"Health check passed: broker reachable, {place_count} place(s) in store")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
