"""Pydantic models for unit records, size buckets and statistic field names.

Unit records arrive from the store as raw meta values (strings, numbers or
nothing at all). They are normalized here so the calculator only ever sees
``Decimal`` or ``None``.
"""
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union
import uuid

from pydantic import BaseModel, Field, field_validator, model_validator
from typing_extensions import Self


PlaceId = Union[str, int, uuid.UUID]
StatValue = Union[int, Decimal]
PlaceStatistics = Dict[str, StatValue]


# Decimal exponents outside this range are corrupt data, not measures
MEASURE_MIN_EXPONENT = -12
MEASURE_MAX_EXPONENT = 14


class Dimension(str, Enum):
    """Size measure of a storage unit."""
    AREA = "m2"
    VOLUME = "m3"


def coerce_measure(value: Any) -> Optional[Decimal]:
    """Convert a raw store value into a non-negative Decimal or None.

    Empty strings, unparseable text, booleans, NaN/infinity, negative numbers
    and non-zero magnitudes outside 1e-12 .. 1e15 are all treated as missing.
    Floats go through ``str()`` so that ``1.005`` is kept as
    ``Decimal("1.005")`` instead of its binary expansion.
    A decimal comma ("1,5") is accepted.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, int):
        number = Decimal(value)
    elif isinstance(value, float):
        number = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if "," in text and "." not in text:
            text = text.replace(",", ".")
        if not text:
            return None
        try:
            number = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None

    if not number.is_finite() or number < 0:
        return None
    if number == 0:
        return number
    if not MEASURE_MIN_EXPONENT <= number.adjusted() <= MEASURE_MAX_EXPONENT:
        return None
    return number


class UnitRecord(BaseModel):
    """One rentable storage unit belonging to a place.

    Attributes:
        id: Opaque unit identifier
        price: Monthly price, None when not set
        area: Floor area in m2 (from the unit type), None when not set
        volume: Volume in m3 (from the unit type), None when not set
        location_id: Sub-location grouping, carried through unused
    """
    id: str = Field(..., description="Unit identifier")
    price: Optional[Decimal] = Field(default=None, description="Unit price")
    area: Optional[Decimal] = Field(default=None, description="Area in m2")
    volume: Optional[Decimal] = Field(default=None, description="Volume in m3")
    location_id: Optional[str] = Field(default=None, description="Sub-location reference")

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, v: Any) -> str:
        """Accept any identifier type and keep it as string."""
        return str(v)

    @field_validator("location_id", mode="before")
    @classmethod
    def validate_location_id(cls, v: Any) -> Optional[str]:
        if v is None or v == "":
            return None
        return str(v)

    @field_validator("price", "area", "volume", mode="before")
    @classmethod
    def validate_measure(cls, v: Any) -> Optional[Decimal]:
        return coerce_measure(v)

    model_config = {"frozen": True}


class BucketDefinition(BaseModel):
    """Named inclusive size range used to segment units for averaging.

    Adjacent buckets share their boundary value, so a 2 m2 unit counts in
    both the mini (0-2) and the small (2-7) bucket.
    """
    label: str = Field(default="", description="Field name prefix, empty for overall")
    min: Decimal = Field(..., ge=Decimal("0"), description="Inclusive lower bound")
    max: Decimal = Field(..., description="Inclusive upper bound")

    @model_validator(mode="after")
    def validate_range(self) -> Self:
        """Ensure the range is not inverted."""
        if self.min > self.max:
            raise ValueError(f"Bucket '{self.label}' has min {self.min} above max {self.max}")
        return self

    def contains(self, value: Decimal) -> bool:
        """Return True if value lies inside the inclusive range."""
        return self.min <= value <= self.max

    model_config = {"frozen": True}


OVERALL_BUCKET = BucketDefinition(label="", min=0, max=1000)
MINI_BUCKET = BucketDefinition(label="mini size", min=0, max=2)
SMALL_BUCKET = BucketDefinition(label="small size", min=2, max=7)
MEDIUM_BUCKET = BucketDefinition(label="medium size", min=7, max=18)
LARGE_BUCKET = BucketDefinition(label="large size", min=18, max=25)
VERY_LARGE_BUCKET = BucketDefinition(label="very large size", min=25, max=1000)

STANDARD_BUCKETS: Tuple[BucketDefinition, ...] = (
    OVERALL_BUCKET,
    MINI_BUCKET,
    SMALL_BUCKET,
    MEDIUM_BUCKET,
    LARGE_BUCKET,
    VERY_LARGE_BUCKET,
)

# Simple mean first, then price per m2 and per m3
AVERAGE_MODES: Tuple[Optional[Dimension], ...] = (None, Dimension.AREA, Dimension.VOLUME)

FIELD_NUM_UNITS = "num of units available"
FIELD_NUM_M2 = "num of m2 available"
FIELD_NUM_M3 = "num of m3 available"


def field_name_for(bucket: BucketDefinition, dimension: Optional[Dimension] = None) -> str:
    """Build the stored field name of an average.

    Examples:
        >>> field_name_for(OVERALL_BUCKET)
        'average price'
        >>> field_name_for(MINI_BUCKET, Dimension.VOLUME)
        'mini size average m3 price'
    """
    parts = [bucket.label, "average"]
    if dimension is not None:
        parts.append(Dimension(dimension).value)
    parts.append("price")
    return " ".join(part for part in parts if part)


def stat_field_names(buckets: Tuple[BucketDefinition, ...] = STANDARD_BUCKETS) -> Tuple[str, ...]:
    """All field names produced for a bucket catalog, in canonical order."""
    return (FIELD_NUM_UNITS, FIELD_NUM_M2, FIELD_NUM_M3) + tuple(
        field_name_for(bucket, dimension)
        for bucket in buckets
        for dimension in AVERAGE_MODES
    )


STAT_FIELD_NAMES: Tuple[str, ...] = stat_field_names()
