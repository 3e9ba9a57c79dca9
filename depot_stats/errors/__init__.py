"""Error handling module."""
from depot_stats.errors.exceptions import (
    DepotStatsError,
    StoreError,
    StoreUnavailableError,
    UnknownFieldError,
    ConfigurationError,
)

__all__ = [
    "DepotStatsError",
    "StoreError",
    "StoreUnavailableError",
    "UnknownFieldError",
    "ConfigurationError",
]
