"""
Database Engine and Session Management

Async SQLAlchemy engine, session factory, FastAPI dependency and the
transaction helper used by every write path.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cprtrack.config import settings

logger = logging.getLogger(__name__)

engine = create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG, pool_pre_ping=True)

async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a database session."""
    async with async_session_maker() as session:
        yield session


async def close_db() -> None:
    """Dispose of the engine's connection pool."""
    await engine.dispose()


@asynccontextmanager
async def atomic(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Run a unit of work as one transaction.

    Commits when the block exits normally. Any exception rolls back every
    write made inside the block and is re-raised.
    """
    try:
        yield db
        await db.commit()
    except Exception:
        await db.rollback()
        logger.debug("Transaction rolled back", exc_info=True)
        raise
