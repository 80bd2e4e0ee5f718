"""
Pytest Configuration and Fixtures

Shared test fixtures for unit and integration tests.
"""

import os
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import configure_mappers
from sqlalchemy.pool import StaticPool

from cprtrack.core.clock import FixedClock
from cprtrack.core.models import Base
from factories import Org, create_org

# Ensure all mappers are configured
configure_mappers()

IST = ZoneInfo("Asia/Kolkata")

# Saturday 10 Jan 2026, 12:00 in Asia/Kolkata
NOW = datetime(2026, 1, 10, 6, 30, tzinfo=UTC)


@pytest.fixture
def ist() -> ZoneInfo:
    return IST


@pytest.fixture
def clock() -> FixedClock:
    """Clock pinned to NOW."""
    return FixedClock(NOW)


@pytest.fixture
async def async_engine():
    """Create async engine for testing.

    In-memory SQLite unless DATABASE_URL points at a real database.
    """
    database_url = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

    if database_url.startswith("sqlite"):
        engine = create_async_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    else:
        engine = create_async_engine(database_url, echo=False)
        async with engine.begin() as conn:
            await conn.execute(text("DROP SCHEMA public CASCADE"))
            await conn.execute(text("CREATE SCHEMA public"))
            await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(async_engine) -> AsyncSession:
    """Create database session for testing."""
    session_maker = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session


@pytest.fixture
async def org(db_session: AsyncSession) -> Org:
    return await create_org(db_session)
