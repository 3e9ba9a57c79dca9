"""Abstract place/unit store interface."""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

from depot_stats.errors.exceptions import UnknownFieldError
from depot_stats.models.statistics import (
    STANDARD_BUCKETS,
    STAT_FIELD_NAMES,
    BucketDefinition,
    PlaceId,
    StatValue,
    UnitRecord,
    stat_field_names,
)

# Raw fields readable on a unit; m2/m3 resolve through the unit type
UNIT_FIELDS = ("price", "rel_type", "rel_location", "m2", "m3")
UNIT_TYPE_FIELDS = ("m2", "m3")


def check_unit_field(field_name: str) -> None:
    """Raise UnknownFieldError unless field_name is a readable unit field."""
    if field_name not in UNIT_FIELDS:
        raise UnknownFieldError(
            f"Unknown unit field '{field_name}', expected one of {', '.join(UNIT_FIELDS)}"
        )


def check_stat_field(field_name: str, field_names: Sequence[str] = STAT_FIELD_NAMES) -> None:
    """Raise UnknownFieldError unless field_name is one of field_names."""
    if field_name not in field_names:
        raise UnknownFieldError(f"Unknown statistic field '{field_name}'")


class PlaceStore(ABC):
    """Abstract base class for the store holding places, units and cached statistics.

    The statistics batch only depends on this interface, so the relational
    store and the in-memory store are interchangeable.

    Implementations must provide:
    - list_place_ids(): All place identifiers, unpaged
    - get_units_for_place(): Unit records of one place
    - get_stat_field() / set_stat_field(): Cached statistic values
    - read_field_of_unit(): Raw unit field, resolving m2/m3 via the unit type
    """

    def __init__(self, buckets: Sequence[BucketDefinition] = STANDARD_BUCKETS):
        """
        Initialize store.

        Args:
            buckets: Bucket catalog whose statistic fields this store accepts
        """
        self.buckets: Tuple[BucketDefinition, ...] = tuple(buckets)
        self.stat_field_names: Tuple[str, ...] = stat_field_names(self.buckets)

    @abstractmethod
    async def list_place_ids(self) -> List[PlaceId]:
        """Return the identifiers of all places.

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        pass

    @abstractmethod
    async def get_units_for_place(self, place_id: PlaceId) -> List[UnitRecord]:
        """Return unit records of a place.

        Returns:
            Unit records, empty if the place has no units or does not exist
        """
        pass

    @abstractmethod
    async def get_stat_field(self, place_id: PlaceId, field_name: str) -> Optional[Decimal]:
        """Return a stored statistic value, None when absent."""
        pass

    @abstractmethod
    async def set_stat_field(self, place_id: PlaceId, field_name: str, value: StatValue) -> bool:
        """Store a statistic value, overwriting the previous one.

        Returns:
            True if the value was written, False if the store rejected it

        Raises:
            UnknownFieldError: If field_name is not in self.stat_field_names
        """
        pass

    @abstractmethod
    async def read_field_of_unit(self, unit_id: Any, field_name: str) -> Any:
        """Return a raw unit field value (None when unset or unit unknown).

        Raises:
            UnknownFieldError: If field_name is not in UNIT_FIELDS
        """
        pass

    async def get_statistics(self, place_id: PlaceId) -> Dict[str, Optional[Decimal]]:
        """Read every statistic field of the store's catalog for a place."""
        values: Dict[str, Optional[Decimal]] = {}
        for field_name in self.stat_field_names:
            values[field_name] = await self.get_stat_field(place_id, field_name)
        return values
