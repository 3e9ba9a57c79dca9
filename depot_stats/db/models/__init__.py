"""Database models mapping the place/unit store schema."""
from depot_stats.db.models.place import Place
from depot_stats.db.models.unit_type import UnitType
from depot_stats.db.models.unit import Unit
from depot_stats.db.models.place_statistic import PlaceStatistic

__all__ = [
    "Place",
    "UnitType",
    "Unit",
    "PlaceStatistic",
]
