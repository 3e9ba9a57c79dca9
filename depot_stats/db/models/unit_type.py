"""UnitType ORM model holding the size of a kind of storage unit."""
from sqlalchemy import String, Numeric, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from depot_stats.db.base import Base, UUIDMixin, TimestampMixin
from decimal import Decimal
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from depot_stats.db.models.unit import Unit


class UnitType(Base, UUIDMixin, TimestampMixin):
    """Size template shared by many units.

    Area and volume live here rather than on the unit; a unit reaches them
    through ``unit_type_id``.
    """

    __tablename__ = "unit_types"
    __table_args__ = (
        CheckConstraint('m2 IS NULL OR m2 >= 0', name='check_m2_non_negative'),
        CheckConstraint('m3 IS NULL OR m3 >= 0', name='check_m3_non_negative'),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    m2: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 3),
        nullable=True,
        doc="Floor area in square meters"
    )
    m3: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 3),
        nullable=True,
        doc="Volume in cubic meters"
    )

    # Relationships
    units: Mapped[List["Unit"]] = relationship(back_populates="unit_type")

    def __repr__(self) -> str:
        return f"<UnitType(id={self.id}, name='{self.name}', m2={self.m2}, m3={self.m3})>"
