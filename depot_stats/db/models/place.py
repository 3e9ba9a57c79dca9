"""Place ORM model."""
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from depot_stats.db.base import Base, UUIDMixin, TimestampMixin
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from depot_stats.db.models.unit import Unit
    from depot_stats.db.models.place_statistic import PlaceStatistic


class Place(Base, UUIDMixin, TimestampMixin):
    """Place model representing a location that offers storage units.

    Attributes:
        name: Display name of the place

    Relationships:
        units: Rentable storage units of the place
        statistics: Cached statistic values (one row per field name)
    """

    __tablename__ = "places"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # Relationships
    units: Mapped[List["Unit"]] = relationship(back_populates="place")
    statistics: Mapped[List["PlaceStatistic"]] = relationship(back_populates="place")

    def __repr__(self) -> str:
        return f"<Place(id={self.id}, name='{self.name}')>"
