"""Database module."""
from depot_stats.db.base import (
    Base,
    UUIDMixin,
    TimestampMixin,
    engine,
    async_session_maker,
    dispose_engine,
)

__all__ = [
    "Base",
    "UUIDMixin",
    "TimestampMixin",
    "engine",
    "async_session_maker",
    "dispose_engine",
]
