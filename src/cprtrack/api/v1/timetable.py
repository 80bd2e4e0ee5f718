"""
Timetable API Endpoints

Generate weekly sessions, and list, edit or delete individual sessions.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from cprtrack.api.dependencies import get_calendar_client, get_clock
from cprtrack.config import settings
from cprtrack.core.clock import Clock
from cprtrack.core.database import get_db
from cprtrack.core.exceptions import NotFoundError, SchedulingConflictError
from cprtrack.core.models import ClassSession
from cprtrack.core.schemas.timetable import (
    ClassSessionSchema,
    ClassSessionUpdate,
    WeeklyScheduleCreate,
    WeeklyScheduleResponse,
)
from cprtrack.core.validation import ValidationError
from cprtrack.integrations.calendar import CalendarSyncClient
from cprtrack.scheduling import (
    SessionChanges,
    SessionFilters,
    TimetableService,
    WeeklyScheduleRequest,
)

router = APIRouter()


def get_timetable_service(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    calendar: CalendarSyncClient | None = Depends(get_calendar_client),
) -> TimetableService:
    return TimetableService(
        db,
        tz=settings.timezone,
        clock=clock,
        calendar=calendar,
        allow_past_default=settings.SCHEDULE_ALLOW_PAST_SESSIONS,
    )


@router.post(
    "/weekly",
    response_model=WeeklyScheduleResponse,
    status_code=status.HTTP_201_CREATED,
    responses={200: {"description": "Template produced no sessions in the range"}},
)
async def schedule_weekly(
    payload: WeeklyScheduleCreate,
    response: Response,
    service: TimetableService = Depends(get_timetable_service),
) -> WeeklyScheduleResponse:
    """Expand a weekly template into sessions over a date range.

    The whole batch is rejected with 409 if any session would double-book
    the room or the subject's teacher.
    """
    request = WeeklyScheduleRequest(
        subject_id=payload.subject_id,
        range_start=payload.range_start,
        range_end=payload.range_end,
        items=payload.items,
        room_id=payload.room_id,
        time_zone=payload.time_zone,
        allow_past=payload.allow_past,
    )
    try:
        result = await service.schedule_weekly(request)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except SchedulingConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    if not result.sessions:
        response.status_code = status.HTTP_200_OK

    return WeeklyScheduleResponse(
        created=len(result.sessions),
        time_zone=result.time_zone,
        sessions=[ClassSessionSchema.model_validate(s) for s in result.sessions],
    )


@router.get("/sessions", response_model=list[ClassSessionSchema])
async def list_sessions(
    subject_id: UUID | None = Query(None),
    teacher_id: UUID | None = Query(None),
    division_id: UUID | None = Query(None),
    room_id: UUID | None = Query(None),
    start_from: datetime | None = Query(None, description="Sessions starting at or after"),
    start_before: datetime | None = Query(None, description="Sessions starting before"),
    service: TimetableService = Depends(get_timetable_service),
) -> list[ClassSession]:
    """List sessions, earliest first."""
    return await service.list_sessions(
        SessionFilters(
            subject_id=subject_id,
            teacher_id=teacher_id,
            division_id=division_id,
            room_id=room_id,
            start_from=start_from,
            start_before=start_before,
        )
    )


@router.patch("/sessions/{session_id}", response_model=ClassSessionSchema)
async def update_session(
    session_id: UUID,
    payload: ClassSessionUpdate,
    service: TimetableService = Depends(get_timetable_service),
) -> ClassSession:
    """Move, re-room or relabel a session."""
    changes = SessionChanges(
        start_at=payload.start_at,
        end_at=payload.end_at,
        room_id=payload.room_id,
        clear_room=payload.clear_room,
        lecture_number=payload.lecture_number,
    )
    try:
        return await service.update_session(session_id, changes)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except SchedulingConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: UUID, service: TimetableService = Depends(get_timetable_service)
) -> None:
    """Delete a session."""
    try:
        await service.delete_session(session_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
