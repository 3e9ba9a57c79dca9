"""Relational place store backed by SQLAlchemy async sessions.

Every public call opens its own session and commits on its own, so a batch
run that dies halfway leaves the already written fields in place.
"""
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence
import uuid

import structlog
from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.ext.asyncio import AsyncSession

from depot_stats.db.base import async_session_maker
from depot_stats.db.models import PlaceStatistic, Place, Unit, UnitType
from depot_stats.errors.exceptions import StoreError, StoreUnavailableError
from depot_stats.models.statistics import (
    STANDARD_BUCKETS,
    BucketDefinition,
    PlaceId,
    StatValue,
    UnitRecord,
)
from depot_stats.services.store.base import (
    PlaceStore,
    check_stat_field,
    check_unit_field,
)

logger = structlog.get_logger(__name__)

_CONNECTION_ERRORS = (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError)

_UNIT_FIELD_COLUMNS: Dict[str, Any] = {
    "price": Unit.price,
    "rel_type": Unit.unit_type_id,
    "rel_location": Unit.location_id,
    "m2": UnitType.m2,
    "m3": UnitType.m3,
}


def _is_connection_error(error: SQLAlchemyError) -> bool:
    """Tell whether a database error means the store could not be reached."""
    if isinstance(error, _CONNECTION_ERRORS):
        return True
    return isinstance(error, DBAPIError) and error.connection_invalidated


def _as_uuid(value: Any) -> Optional[uuid.UUID]:
    """Parse an identifier into a UUID, None if it is not one."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class SqlPlaceStore(PlaceStore):
    """PlaceStore over the places/units/unit_types/place_statistics tables."""

    def __init__(self, session_maker=None, buckets: Sequence[BucketDefinition] = STANDARD_BUCKETS):
        """
        Initialize store.

        Args:
            session_maker: Async session factory (defaults to the shared one)
            buckets: Bucket catalog whose statistic fields this store accepts
        """
        super().__init__(buckets)
        self._session_maker = session_maker or async_session_maker

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Open a session, translating database errors into store errors.

        Connection failures become StoreUnavailableError and are retried by
        the batch. Anything else the database rejects (bad data, constraint
        violations) becomes a plain StoreError.
        """
        try:
            async with self._session_maker() as session:
                yield session
        except SQLAlchemyError as e:
            unavailable = _is_connection_error(e)
            logger.error(
                "store_operation_failed",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
                retryable=unavailable,
            )
            if unavailable:
                raise StoreUnavailableError(f"{operation} failed: {e}") from e
            raise StoreError(f"{operation} failed: {e}") from e

    async def list_place_ids(self) -> List[uuid.UUID]:
        async with self._session("list_place_ids") as session:
            result = await session.execute(
                select(Place.id).order_by(Place.created_at, Place.id)
            )
            return list(result.scalars().all())

    async def get_units_for_place(self, place_id: PlaceId) -> List[UnitRecord]:
        parsed_id = _as_uuid(place_id)
        if parsed_id is None:
            logger.warning("invalid_place_id", place_id=str(place_id))
            return []

        stmt = (
            select(Unit.id, Unit.price, Unit.location_id, UnitType.m2, UnitType.m3)
            .outerjoin(UnitType, Unit.unit_type_id == UnitType.id)
            .where(Unit.place_id == parsed_id)
            .order_by(Unit.created_at, Unit.id)
        )
        async with self._session("get_units_for_place") as session:
            result = await session.execute(stmt)
            rows = result.all()

        return [
            UnitRecord(
                id=row.id,
                price=row.price,
                area=row.m2,
                volume=row.m3,
                location_id=row.location_id,
            )
            for row in rows
        ]

    async def get_stat_field(self, place_id: PlaceId, field_name: str) -> Optional[Decimal]:
        parsed_id = _as_uuid(place_id)
        if parsed_id is None:
            return None

        stmt = select(PlaceStatistic.value).where(
            PlaceStatistic.place_id == parsed_id,
            PlaceStatistic.field_name == field_name,
        )
        async with self._session("get_stat_field") as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def set_stat_field(self, place_id: PlaceId, field_name: str, value: StatValue) -> bool:
        check_stat_field(field_name, self.stat_field_names)
        parsed_id = _as_uuid(place_id)
        if parsed_id is None:
            logger.warning("invalid_place_id", place_id=str(place_id), field_name=field_name)
            return False

        stmt = pg_insert(PlaceStatistic).values(
            id=uuid.uuid4(),
            place_id=parsed_id,
            field_name=field_name,
            value=Decimal(value),
        )
        stmt = stmt.on_conflict_do_update(
            constraint="uq_place_statistics_place_field",
            set_={"value": stmt.excluded.value, "updated_at": func.now()},
        )
        async with self._session("set_stat_field") as session:
            await session.execute(stmt)
            await session.commit()

        logger.debug(
            "stat_field_written",
            place_id=str(parsed_id),
            field_name=field_name,
            value=str(value),
        )
        return True

    async def read_field_of_unit(self, unit_id: Any, field_name: str) -> Any:
        check_unit_field(field_name)
        parsed_id = _as_uuid(unit_id)
        if parsed_id is None:
            return None

        stmt = (
            select(_UNIT_FIELD_COLUMNS[field_name])
            .select_from(Unit)
            .outerjoin(UnitType, Unit.unit_type_id == UnitType.id)
            .where(Unit.id == parsed_id)
        )
        async with self._session("read_field_of_unit") as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()
