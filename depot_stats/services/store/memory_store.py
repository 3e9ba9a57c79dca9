"""In-memory place store for tests and local dry runs."""
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from depot_stats.models.statistics import (
    STANDARD_BUCKETS,
    BucketDefinition,
    PlaceId,
    StatValue,
    UnitRecord,
)
from depot_stats.services.store.base import (
    PlaceStore,
    UNIT_TYPE_FIELDS,
    check_stat_field,
    check_unit_field,
)


class InMemoryPlaceStore(PlaceStore):
    """Dictionary-backed store.

    Units keep raw meta values (``price``, ``rel_type``, ``rel_location``)
    and unit types keep ``m2``/``m3``, mirroring a key/value content store.
    Unit records are assembled through ``read_field_of_unit`` so the m2/m3
    lookup goes through the unit type exactly like the real store.
    """

    def __init__(self, buckets: Sequence[BucketDefinition] = STANDARD_BUCKETS):
        """Initialize an empty store accepting the statistics of buckets."""
        super().__init__(buckets)
        self.places: Dict[PlaceId, List[Any]] = {}
        self.units: Dict[Any, Dict[str, Any]] = {}
        self.unit_types: Dict[Any, Dict[str, Any]] = {}
        self.stats: Dict[PlaceId, Dict[str, Decimal]] = {}

    def add_place(self, place_id: PlaceId) -> None:
        self.places.setdefault(place_id, [])

    def add_unit_type(self, unit_type_id: Any, m2: Any = None, m3: Any = None) -> None:
        self.unit_types[unit_type_id] = {"m2": m2, "m3": m3}

    def add_unit(
        self,
        place_id: PlaceId,
        unit_id: Any,
        price: Any = None,
        unit_type_id: Any = None,
        location_id: Any = None,
    ) -> None:
        """Register a unit under a place, creating the place if needed."""
        self.add_place(place_id)
        self.places[place_id].append(unit_id)
        self.units[unit_id] = {
            "price": price,
            "rel_type": unit_type_id,
            "rel_location": location_id,
        }

    async def list_place_ids(self) -> List[PlaceId]:
        return list(self.places)

    async def read_field_of_unit(self, unit_id: Any, field_name: str) -> Any:
        check_unit_field(field_name)
        meta = self.units.get(unit_id)
        if meta is None:
            return None
        if field_name in UNIT_TYPE_FIELDS:
            unit_type = self.unit_types.get(meta.get("rel_type"))
            return unit_type.get(field_name) if unit_type else None
        return meta.get(field_name)

    async def get_units_for_place(self, place_id: PlaceId) -> List[UnitRecord]:
        records = []
        for unit_id in self.places.get(place_id, []):
            records.append(UnitRecord(
                id=unit_id,
                price=await self.read_field_of_unit(unit_id, "price"),
                area=await self.read_field_of_unit(unit_id, "m2"),
                volume=await self.read_field_of_unit(unit_id, "m3"),
                location_id=await self.read_field_of_unit(unit_id, "rel_location"),
            ))
        return records

    async def get_stat_field(self, place_id: PlaceId, field_name: str) -> Optional[Decimal]:
        return self.stats.get(place_id, {}).get(field_name)

    async def set_stat_field(self, place_id: PlaceId, field_name: str, value: StatValue) -> bool:
        check_stat_field(field_name, self.stat_field_names)
        self.stats.setdefault(place_id, {})[field_name] = Decimal(value)
        return True
