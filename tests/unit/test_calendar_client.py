"""
Tests for the Calendar Sync Client

Request shapes, error mapping and the never-raise notification wrapper.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import httpx
import pytest

from cprtrack.core.models import ClassSession
from cprtrack.integrations.calendar import (
    CalendarSyncClient,
    CalendarSyncError,
    notify_safely,
    session_payload,
)


def make_session(**overrides) -> ClassSession:
    fields = {
        "subject_id": uuid4(),
        "division_id": uuid4(),
        "teacher_id": uuid4(),
        "room_id": None,
        "start_at": datetime(2026, 1, 12, 4, 30, tzinfo=UTC),
        "end_at": datetime(2026, 1, 12, 5, 30, tzinfo=UTC),
        "lecture_number": "3",
    }
    fields.update(overrides)
    return ClassSession(**fields)


def response(status_code: int, body: dict | None = None) -> MagicMock:
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.is_success = 200 <= status_code < 300
    mock_response.content = b"{}" if body is not None else b""
    mock_response.json.return_value = body
    return mock_response


@pytest.fixture
def client() -> CalendarSyncClient:
    return CalendarSyncClient(base_url="https://calendar.test/api/", api_token="secret")


class TestCalendarClientInitialization:
    def test_strips_trailing_slash(self, client: CalendarSyncClient):
        assert client.base_url == "https://calendar.test/api"

    def test_from_settings_disabled_without_url(self):
        with patch("cprtrack.integrations.calendar.settings") as mock_settings:
            mock_settings.calendar_sync_enabled = False

            assert CalendarSyncClient.from_settings() is None

    def test_from_settings(self):
        with patch("cprtrack.integrations.calendar.settings") as mock_settings:
            mock_settings.calendar_sync_enabled = True
            mock_settings.CALENDAR_SYNC_URL = "https://calendar.test"
            mock_settings.CALENDAR_SYNC_TOKEN = "token"
            mock_settings.CALENDAR_SYNC_TIMEOUT_SECONDS = 2.0

            client = CalendarSyncClient.from_settings()

        assert client is not None
        assert client.base_url == "https://calendar.test"
        assert client.api_token == "token"
        assert client.timeout == 2.0


class TestSessionEvents:
    async def test_session_created_returns_event_id(self, client: CalendarSyncClient):
        session = make_session()

        with patch("httpx.AsyncClient.request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = response(201, {"id": "evt-1"})

            event_id = await client.session_created(session)

        assert event_id == "evt-1"
        args, kwargs = mock_request.call_args
        assert args == ("POST", "https://calendar.test/api/events")
        assert kwargs["json"] == session_payload(session)
        assert kwargs["headers"]["Authorization"] == "Bearer secret"

    async def test_session_updated_uses_event_id(self, client: CalendarSyncClient):
        session = make_session(calendar_event_id="evt-9")

        with patch("httpx.AsyncClient.request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = response(204)

            await client.session_updated(session)

        args, _ = mock_request.call_args
        assert args == ("PUT", "https://calendar.test/api/events/evt-9")

    async def test_update_without_event_is_skipped(self, client: CalendarSyncClient):
        with patch("httpx.AsyncClient.request", new_callable=AsyncMock) as mock_request:
            await client.session_updated(make_session())

        mock_request.assert_not_called()

    async def test_session_deleted(self, client: CalendarSyncClient):
        with patch("httpx.AsyncClient.request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = response(204)

            await client.session_deleted(uuid4(), "evt-2")

        args, _ = mock_request.call_args
        assert args == ("DELETE", "https://calendar.test/api/events/evt-2")

    async def test_error_status_raises(self, client: CalendarSyncClient):
        with patch("httpx.AsyncClient.request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = response(500, {"error": "boom"})

            with pytest.raises(CalendarSyncError, match="500"):
                await client.session_created(make_session())

    async def test_transport_error_raises(self, client: CalendarSyncClient):
        with patch("httpx.AsyncClient.request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = httpx.ConnectError("refused")

            with pytest.raises(CalendarSyncError, match="HTTP error"):
                await client.session_created(make_session())


class TestNotifySafely:
    async def test_returns_result(self):
        async def ok() -> str:
            return "evt-1"

        assert await notify_safely(ok(), action="create") == "evt-1"

    async def test_swallows_and_logs_failure(self, caplog):
        async def fail() -> str:
            raise CalendarSyncError("down")

        result = await notify_safely(fail(), action="create session x")

        assert result is None
        assert "Calendar sync failed (create session x): down" in caplog.text
