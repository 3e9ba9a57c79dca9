"""SQLAlchemy declarative base, shared mixins and the process-wide engine.

The engine is sized for the sequential batch: the worker runs one job at a
time and every store call holds a single connection.
"""
from datetime import datetime
import uuid

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncAttrs, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from depot_stats.config import settings


class Base(AsyncAttrs, DeclarativeBase):
    """Declarative base for the place store tables."""
    pass


class UUIDMixin:
    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
        server_default=func.gen_random_uuid(),
    )


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), onupdate=func.now())


engine = create_async_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=0,
    pool_recycle=1800,
    pool_pre_ping=True,
)

async_session_maker = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def dispose_engine() -> None:
    """Close pooled connections (worker shutdown, end of a CLI command)."""
    await engine.dispose()
