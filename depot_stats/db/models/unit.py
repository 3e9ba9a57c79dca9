"""Unit ORM model for a single rentable storage unit."""
from sqlalchemy import ForeignKey, Numeric, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from depot_stats.db.base import Base, UUIDMixin, TimestampMixin
from decimal import Decimal
from typing import Optional, TYPE_CHECKING
import uuid

if TYPE_CHECKING:
    from depot_stats.db.models.place import Place
    from depot_stats.db.models.unit_type import UnitType


class Unit(Base, UUIDMixin, TimestampMixin):
    """Unit model.

    Attributes:
        place_id: Place offering the unit
        unit_type_id: Size template (m2/m3), optional
        location_id: Sub-location grouping inside the place, optional
        price: Monthly price, NULL when not set
    """

    __tablename__ = "units"
    __table_args__ = (
        CheckConstraint('price IS NULL OR price >= 0', name='check_unit_price_non_negative'),
    )

    place_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("places.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    unit_type_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("unit_types.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    location_id: Mapped[uuid.UUID | None] = mapped_column(nullable=True)
    price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    # Relationships
    place: Mapped["Place"] = relationship(back_populates="units")
    unit_type: Mapped[Optional["UnitType"]] = relationship(back_populates="units")

    def __repr__(self) -> str:
        return f"<Unit(id={self.id}, place_id={self.place_id}, price={self.price})>"
