"""
Shared FastAPI dependencies.

Tests override these through `app.dependency_overrides` to pin the clock or
plug in a calendar client.
"""

from cprtrack.core.clock import Clock, SystemClock
from cprtrack.integrations.calendar import CalendarSyncClient


def get_clock() -> Clock:
    """Time source for request handling."""
    return SystemClock()


def get_calendar_client() -> CalendarSyncClient | None:
    """Calendar sync client, or None when sync is disabled."""
    return CalendarSyncClient.from_settings()
