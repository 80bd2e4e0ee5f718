"""
Timetable Pydantic Schemas

Request and response models for timetable API endpoints.
"""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field


class WeeklyScheduleCreate(BaseModel):
    """Weekly template to expand into sessions.

    Items are kept loose (day_of_week, start_time "HH:MM", end_time "HH:MM",
    lecture_number); malformed items are skipped by the generator.
    """

    subject_id: UUID
    range_start: date
    range_end: date
    items: list[dict[str, Any]] = Field(..., min_length=1)
    room_id: UUID | None = None
    time_zone: str | None = Field(
        default=None, description="IANA zone; defaults to the configured zone"
    )
    allow_past: bool | None = Field(
        default=None, description="Keep sessions starting in the past; defaults to config"
    )


class ClassSessionSchema(BaseModel):
    """Class session response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    subject_id: UUID
    division_id: UUID
    teacher_id: UUID
    room_id: UUID | None = None
    start_at: datetime
    end_at: datetime
    lecture_number: str
    calendar_event_id: str | None = None


class WeeklyScheduleResponse(BaseModel):
    created: int
    time_zone: str
    sessions: list[ClassSessionSchema]


class ClassSessionUpdate(BaseModel):
    """Changes to one session. Omitted fields stay as they are.

    Instants must carry an offset; naive wall times are rejected.
    """

    start_at: AwareDatetime | None = None
    end_at: AwareDatetime | None = None
    room_id: UUID | None = None
    clear_room: bool = False
    lecture_number: int | str | None = None
