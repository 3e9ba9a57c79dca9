"""Pydantic validation models."""
from depot_stats.models.statistics import (
    PlaceId,
    StatValue,
    PlaceStatistics,
    Dimension,
    UnitRecord,
    BucketDefinition,
    coerce_measure,
    OVERALL_BUCKET,
    MINI_BUCKET,
    SMALL_BUCKET,
    MEDIUM_BUCKET,
    LARGE_BUCKET,
    VERY_LARGE_BUCKET,
    STANDARD_BUCKETS,
    AVERAGE_MODES,
    FIELD_NUM_UNITS,
    FIELD_NUM_M2,
    FIELD_NUM_M3,
    STAT_FIELD_NAMES,
    field_name_for,
    stat_field_names,
)

__all__ = [
    "PlaceId",
    "StatValue",
    "PlaceStatistics",
    "Dimension",
    "UnitRecord",
    "BucketDefinition",
    "coerce_measure",
    "OVERALL_BUCKET",
    "MINI_BUCKET",
    "SMALL_BUCKET",
    "MEDIUM_BUCKET",
    "LARGE_BUCKET",
    "VERY_LARGE_BUCKET",
    "STANDARD_BUCKETS",
    "AVERAGE_MODES",
    "FIELD_NUM_UNITS",
    "FIELD_NUM_M2",
    "FIELD_NUM_M3",
    "STAT_FIELD_NAMES",
    "field_name_for",
    "stat_field_names",
]
