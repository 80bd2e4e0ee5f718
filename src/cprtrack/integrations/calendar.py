"""
Calendar Sync Client

Pushes class sessions to an external calendar service over HTTP. Used only
after the timetable transaction has committed; failures are logged and never
affect the stored schedule.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, TypeVar

import httpx

from cprtrack.config import settings

if TYPE_CHECKING:
    from uuid import UUID

    from cprtrack.core.models import ClassSession

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CalendarSyncError(Exception):
    """Calendar sync API error."""

    pass


def session_payload(session: ClassSession) -> dict[str, Any]:
    """Event body for a session. Reads only column attributes."""
    return {
        "session_id": str(session.id),
        "subject_id": str(session.subject_id),
        "teacher_id": str(session.teacher_id),
        "room_id": str(session.room_id) if session.room_id else None,
        "lecture_number": session.lecture_number,
        "start_at": session.start_at.isoformat(),
        "end_at": session.end_at.isoformat(),
    }


class CalendarSyncClient:
    """Client for the calendar sync webhook.

    Events live under `{base_url}/events`; the service answers a create with
    the new event's id.
    """

    def __init__(self, *, base_url: str, api_token: str = "", timeout: float = 5.0):
        """Initialize calendar client.

        Args:
            base_url: Calendar sync service base URL
            api_token: Bearer token (omitted from requests when empty)
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.api_token = api_token
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> CalendarSyncClient | None:
        """Create client from application settings.

        Returns:
            Configured client, or None when calendar sync is disabled
        """
        if not settings.calendar_sync_enabled:
            return None
        return cls(
            base_url=settings.CALENDAR_SYNC_URL,
            api_token=settings.CALENDAR_SYNC_TOKEN,
            timeout=settings.CALENDAR_SYNC_TIMEOUT_SECONDS,
        )

    async def session_created(self, session: ClassSession) -> str | None:
        """Create a calendar event for a new session.

        Returns:
            External event id, if the service returned one

        Raises:
            CalendarSyncError: If the request fails
        """
        data = await self._request("POST", "/events", json=session_payload(session))
        event_id = data.get("id") if data else None
        return str(event_id) if event_id else None

    async def session_updated(self, session: ClassSession) -> None:
        """Update the event of a changed session (no-op if it has none)."""
        if not session.calendar_event_id:
            logger.debug(f"Session {session.id} has no calendar event; update skipped")
            return
        await self._request(
            "PUT", f"/events/{session.calendar_event_id}", json=session_payload(session)
        )

    async def session_deleted(self, session_id: UUID, calendar_event_id: str | None) -> None:
        """Remove the event of a deleted session (no-op if it had none)."""
        if not calendar_event_id:
            logger.debug(f"Session {session_id} had no calendar event; delete skipped")
            return
        await self._request("DELETE", f"/events/{calendar_event_id}")

    async def _request(
        self, method: str, path: str, *, json: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        """Send one request to the calendar service.

        Returns:
            Decoded JSON body, or None for an empty response

        Raises:
            CalendarSyncError: On transport errors or non-2xx responses
        """
        headers = {"Content-Type": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method, f"{self.base_url}{path}", json=json, headers=headers
                )
        except httpx.HTTPError as e:
            raise CalendarSyncError(f"HTTP error: {e}") from e

        if not response.is_success:
            raise CalendarSyncError(
                f"Calendar sync error ({response.status_code}) on {method} {path}"
            )

        if not response.content:
            return None
        data: dict[str, Any] = response.json()
        return data


async def notify_safely(call: Awaitable[T], *, action: str) -> T | None:
    """Await a calendar call, logging any failure instead of raising.

    Args:
        call: Pending client call
        action: Short description for the log line

    Returns:
        The call's result, or None if it failed
    """
    try:
        return await call
    except Exception as e:
        logger.warning(f"Calendar sync failed ({action}): {e}")
        return None
