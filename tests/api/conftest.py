"""
API test fixtures: an HTTP client bound to the test database session.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from cprtrack.api.dependencies import get_calendar_client, get_clock
from cprtrack.core.clock import FixedClock
from cprtrack.core.database import get_db
from cprtrack.main import app


@pytest.fixture
async def client(db_session: AsyncSession, clock: FixedClock) -> AsyncClient:
    """Create test client with database, clock and calendar overrides."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_calendar_client] = lambda: None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
