"""
Database Session Management

Provides the async SQLAlchemy engine, the per-request session factory, and
translation of driver failures into StorageError.
"""

from __future__ import annotations

import contextlib
import logging
from typing import AsyncGenerator, Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    create_async_engine,
    AsyncSession,
    async_sessionmaker,
)

from ..config import settings
from ..core.errors import StorageError
from .models import Base

logger = logging.getLogger("roadkill.db")


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    SQLite engines use the driver's default pool; server databases get a
    bounded pool whose checkout timeout caps how long a request may wait.
    """
    if database_url.startswith("sqlite"):
        return create_async_engine(database_url, echo=echo)

    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        pool_timeout=settings.db_pool_timeout,
    )


# Create async engine
async_engine = build_engine(settings.database_url, echo=settings.db_echo)

# Session factory
AsyncSessionLocal = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def create_schema(engine: AsyncEngine = async_engine) -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for FastAPI endpoints that need database access.

    The session commits when the request handler returns and rolls back if
    it raises.

    Usage:
        @router.get("/items")
        async def get_items(session: AsyncSession = Depends(get_async_session)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            with storage_errors("commit"):
                await session.commit()
        except Exception:
            await session.rollback()
            raise


@contextlib.contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """
    Re-raise SQLAlchemy failures raised inside the block as StorageError.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Store operation '%s' failed: %s", operation, type(exc).__name__)
        raise StorageError(f"Store operation '{operation}' failed") from exc
