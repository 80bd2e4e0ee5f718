"""
Input validation functions for CPRTrack.

All validation functions follow the pattern:
1. Accept raw input (string, int, etc.)
2. Normalize/clean the input
3. Validate against business rules
4. Return cleaned value or raise ValidationError
"""

import re
from datetime import time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class ValidationError(Exception):
    """Raised when input fails validation."""

    pass


WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

_TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")

# Largest value a 32-bit INTEGER column holds
MAX_LECTURE_NUMBER = 2**31 - 1


# ============================================================================
# Schedule Template Validation
# ============================================================================


def validate_day_of_week(day: str | None) -> str:
    """
    Validate and normalize a weekday name.

    Accepts any casing and surrounding whitespace ("monday", " MONDAY ").

    Args:
        day: Raw weekday name

    Returns:
        Title-cased weekday name as returned by `date.strftime("%A")` in C locale

    Raises:
        ValidationError: If the name is not a weekday
    """
    if not isinstance(day, str) or not day.strip():
        raise ValidationError("Day of week cannot be empty")

    cleaned = day.strip().title()
    if cleaned not in WEEKDAY_NAMES:
        raise ValidationError(f"Unknown day of week: {day!r}")

    return cleaned


def validate_time_of_day(value: str | time | None) -> time:
    """
    Validate a wall-clock time in HH:MM form.

    Args:
        value: "9:30", "09:30" or a `datetime.time`

    Returns:
        `datetime.time` with seconds zeroed

    Raises:
        ValidationError: If the value is not a valid 24-hour time
    """
    if value is None:
        raise ValidationError("Time cannot be empty")

    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)

    if not isinstance(value, str):
        raise ValidationError(f"Invalid time format (expected HH:MM): {value!r}")

    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise ValidationError(f"Invalid time format (expected HH:MM): {value!r}")

    return time(int(match.group(1)), int(match.group(2)))


def validate_lecture_number(value: int | str | None) -> int:
    """
    Validate a lecture number.

    Args:
        value: Raw lecture number (int, or digits as a string; "3.0" from
            spreadsheets is accepted)

    Returns:
        Positive integer lecture number

    Raises:
        ValidationError: If the value is missing, non-numeric, not positive
            or too large to store
    """
    if value is None or isinstance(value, bool):
        raise ValidationError("Lecture number cannot be empty")

    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"Lecture number must be a whole number: {value}")
        value = int(value)

    if isinstance(value, str):
        cleaned = value.strip()
        if re.fullmatch(r"\d+(\.0+)?", cleaned) is None:
            raise ValidationError(f"Lecture number must be a number: {value!r}")
        value = int(cleaned.split(".")[0])

    if not isinstance(value, int):
        raise ValidationError(f"Lecture number must be a number: {value!r}")

    if value <= 0:
        raise ValidationError("Lecture number must be positive")

    if value > MAX_LECTURE_NUMBER:
        raise ValidationError(f"Lecture number must be at most {MAX_LECTURE_NUMBER}")

    return value


def parse_lecture_number(value: str | None) -> int | None:
    """Lecture number of a session label, or None when it has no numeric value."""
    try:
        return validate_lecture_number(value)
    except ValidationError:
        return None


def validate_timezone(name: str | None) -> ZoneInfo:
    """
    Resolve an IANA time zone name.

    Raises:
        ValidationError: If the zone is unknown
    """
    if name is None or not name.strip():
        raise ValidationError("Time zone cannot be empty")

    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise ValidationError(f"Unknown time zone: {name!r}") from e


# ============================================================================
# Curriculum Row Validation
# ============================================================================


def validate_curriculum_name(name: str | None, field: str = "Name") -> str:
    """
    Validate a module, topic or sub-topic name.

    Collapses internal whitespace and strips the ends.

    Raises:
        ValidationError: If the name is blank or longer than 300 characters
    """
    if name is None:
        raise ValidationError(f"{field} cannot be empty")

    cleaned = re.sub(r"\s+", " ", str(name).strip())
    if not cleaned:
        raise ValidationError(f"{field} cannot be empty")

    if len(cleaned) > 300:
        raise ValidationError(f"{field} cannot exceed 300 characters")

    return cleaned
