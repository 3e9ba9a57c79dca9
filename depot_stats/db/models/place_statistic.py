"""PlaceStatistic ORM model: one cached statistic value of a place."""
from sqlalchemy import ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from depot_stats.db.base import Base, UUIDMixin, TimestampMixin
from decimal import Decimal
from typing import TYPE_CHECKING
import uuid

if TYPE_CHECKING:
    from depot_stats.db.models.place import Place


class PlaceStatistic(Base, UUIDMixin, TimestampMixin):
    """Key/value row holding one named statistic of a place.

    Field names are the stored keys, e.g. "num of units available" or
    "mini size average m2 price". Rows are upserted on (place_id, field_name).
    """

    __tablename__ = "place_statistics"
    __table_args__ = (
        UniqueConstraint('place_id', 'field_name', name='uq_place_statistics_place_field'),
    )

    place_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("places.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    field_name: Mapped[str] = mapped_column(String(100), nullable=False)
    value: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)

    # Relationships
    place: Mapped["Place"] = relationship(back_populates="statistics")

    def __repr__(self) -> str:
        return f"<PlaceStatistic(place_id={self.place_id}, field='{self.field_name}', value={self.value})>"
