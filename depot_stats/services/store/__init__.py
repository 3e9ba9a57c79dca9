"""Place/unit store implementations.

Key Components:
    - PlaceStore: Abstract interface used by the statistics batch
    - SqlPlaceStore: SQLAlchemy async implementation
    - InMemoryPlaceStore: Dictionary-backed implementation for tests and dry runs
"""
from depot_stats.services.store.base import (
    PlaceStore,
    UNIT_FIELDS,
    check_stat_field,
    check_unit_field,
)
from depot_stats.services.store.memory_store import InMemoryPlaceStore
from depot_stats.services.store.sql_store import SqlPlaceStore

__all__ = [
    "PlaceStore",
    "UNIT_FIELDS",
    "check_stat_field",
    "check_unit_field",
    "InMemoryPlaceStore",
    "SqlPlaceStore",
]
