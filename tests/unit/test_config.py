"""
Unit Tests for Configuration

Tests for settings and configuration management.
"""

from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from cprtrack.config import Settings


def test_settings_defaults():
    """Test default settings values."""
    settings = Settings()

    assert settings.ENVIRONMENT in ["local", "staging", "production"]
    assert settings.LOG_LEVEL in ["DEBUG", "INFO", "WARNING", "ERROR"]
    assert isinstance(settings.DATABASE_URL, str)
    assert isinstance(settings.SCHEDULE_ALLOW_PAST_SESSIONS, bool)
    assert settings.PROGRESS_LAG_THRESHOLD >= 0


def test_settings_environment_specific():
    """Test environment-specific behavior."""
    settings_local = Settings(ENVIRONMENT="local")
    assert settings_local.is_local is True
    assert settings_local.is_production is False

    settings_prod = Settings(ENVIRONMENT="production")
    assert settings_prod.is_local is False
    assert settings_prod.is_production is True


def test_timezone_property():
    settings = Settings(DEFAULT_TIMEZONE="Europe/Berlin")

    assert settings.timezone == ZoneInfo("Europe/Berlin")


@pytest.mark.parametrize("zone", ["Mars/Olympus", "Asia"])
def test_unknown_timezone_rejected(zone):
    with pytest.raises(ValidationError, match="not a known IANA time zone"):
        Settings(DEFAULT_TIMEZONE=zone)


def test_negative_lag_threshold_rejected():
    with pytest.raises(ValidationError):
        Settings(PROGRESS_LAG_THRESHOLD=-1)


def test_calendar_sync_enabled_only_with_url():
    assert Settings(CALENDAR_SYNC_URL="").calendar_sync_enabled is False
    assert Settings(CALENDAR_SYNC_URL="https://calendar.test").calendar_sync_enabled is True
