"""Statistics aggregation over storage unit records.

Pure functions, no I/O. Every function is total over any list of
``UnitRecord`` (including the empty list): missing or zero prices and sizes
are treated as "not applicable" and skipped, never as zero-valued data, and
every division checks its denominator first.

Key Functions:
    - count_units: Number of units
    - sum_dimension: Total m2 or m3 available
    - average_price: Mean price, or price per m2/m3, inside a size bucket
    - compute_full_statistics: All named statistics for a place

Rounding:
    Results are quantized to 2 decimal places with ROUND_HALF_UP on exact
    Decimal values (half away from zero for the non-negative inputs we
    accept), so 1.005 rounds to 1.01 and 0.125 to 0.13.
"""
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Iterable, Optional, Sequence, Union

from depot_stats.models.statistics import (
    AVERAGE_MODES,
    FIELD_NUM_M2,
    FIELD_NUM_M3,
    FIELD_NUM_UNITS,
    STANDARD_BUCKETS,
    BucketDefinition,
    Dimension,
    PlaceStatistics,
    UnitRecord,
    field_name_for,
)

ZERO = Decimal("0")
TWO_PLACES = Decimal("0.01")
ARITHMETIC_PRECISION = 60


def round_half_up(value: Decimal) -> Decimal:
    """Quantize to 2 decimal places, rounding halves away from zero.

    Precision grows with the magnitude so large values never trap.
    """
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _dimension_value(record: UnitRecord, dimension: Optional[Dimension]) -> Optional[Decimal]:
    # The simple mean filters buckets on area
    if dimension is Dimension.VOLUME:
        return record.volume
    return record.area


def count_units(records: Sequence[UnitRecord]) -> int:
    """Return the number of records regardless of field completeness."""
    return len(records)


def sum_dimension(records: Iterable[UnitRecord], dimension: Union[Dimension, str]) -> Decimal:
    """Sum area or volume across records.

    Args:
        records: Unit records of one or more places
        dimension: Dimension.AREA ("m2") or Dimension.VOLUME ("m3")

    Returns:
        Sum of present, non-zero values, rounded to 2 decimal places
    """
    dimension = Dimension(dimension)
    total = ZERO
    with localcontext() as ctx:
        ctx.prec = ARITHMETIC_PRECISION
        for record in records:
            value = _dimension_value(record, dimension)
            if value:
                total += value
    return round_half_up(total)


def average_price(
    records: Iterable[UnitRecord],
    bucket: BucketDefinition,
    dimension: Optional[Union[Dimension, str]] = None,
) -> Decimal:
    """Calculate the average price of units inside a size bucket.

    A record qualifies when its active size value (area, or volume for
    Dimension.VOLUME) lies inside the inclusive bucket range and both that
    value and the price are present and non-zero.

    Args:
        records: Unit records to average over
        bucket: Inclusive size range
        dimension: None for the simple mean price per unit, Dimension.AREA
            or Dimension.VOLUME for the price per m2 / m3

    Returns:
        Average rounded to 2 decimal places, 0.00 when nothing qualifies
    """
    if dimension is not None:
        dimension = Dimension(dimension)

    qualifying_count = 0
    price_total = ZERO
    size_total = ZERO

    with localcontext() as ctx:
        ctx.prec = ARITHMETIC_PRECISION
        for record in records:
            value = _dimension_value(record, dimension)
            if not record.price or not value:
                continue
            if not bucket.contains(value):
                continue
            price_total += record.price
            size_total += value
            qualifying_count += 1

        if dimension is None:
            average = price_total / qualifying_count if qualifying_count else ZERO
        else:
            average = price_total / size_total if size_total else ZERO
    return round_half_up(average)


def compute_full_statistics(
    records: Iterable[UnitRecord],
    buckets: Sequence[BucketDefinition] = STANDARD_BUCKETS,
) -> PlaceStatistics:
    """Compute every named statistic for a list of unit records.

    Produces the unit count, the m2 and m3 totals, and for every bucket the
    simple mean price plus the price per m2 and per m3. With the standard
    catalog that is 3 + 6 x 3 = 21 fields.

    Returns:
        Ordered dict of field name to value (int for the count, Decimal otherwise)
    """
    records = list(records)

    statistics: PlaceStatistics = {
        FIELD_NUM_UNITS: count_units(records),
        FIELD_NUM_M2: sum_dimension(records, Dimension.AREA),
        FIELD_NUM_M3: sum_dimension(records, Dimension.VOLUME),
    }
    for bucket in buckets:
        for dimension in AVERAGE_MODES:
            statistics[field_name_for(bucket, dimension)] = average_price(
                records, bucket, dimension
            )
    return statistics
