"""
Progress API Endpoints

Per-subject progress and dashboard roll-ups by center, school or division.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cprtrack.api.dependencies import get_clock
from cprtrack.config import settings
from cprtrack.core.clock import Clock
from cprtrack.core.database import get_db
from cprtrack.core.exceptions import NotFoundError
from cprtrack.core.schemas.progress import (
    DashboardResponse,
    DivisionWindowResponse,
    ProgressSnapshotSchema,
    SubjectDetailSchema,
    SubjectProgressSchema,
    SubjectWindowSchema,
    TeacherDetailSchema,
    UnitSummarySchema,
)
from cprtrack.core.validation import ValidationError
from cprtrack.progress import (
    DivisionWindow,
    OrgLevel,
    ProgressBucket,
    ProgressService,
    UnitSummary,
    classify,
)

router = APIRouter()


def get_progress_service(
    db: AsyncSession = Depends(get_db), clock: Clock = Depends(get_clock)
) -> ProgressService:
    return ProgressService(
        db, tz=settings.timezone, clock=clock, lag_threshold=settings.PROGRESS_LAG_THRESHOLD
    )


def to_schema(summary: UnitSummary) -> UnitSummarySchema:
    def details(bucket: ProgressBucket) -> list[SubjectDetailSchema]:
        return [SubjectDetailSchema.model_validate(d) for d in summary.buckets[bucket]]

    return UnitSummarySchema(
        unit_id=summary.unit.id,
        unit_name=summary.unit.name,
        level=summary.unit.level.value,
        total_subjects=summary.total_subjects,
        subjects_without_curriculum=summary.subjects_without_curriculum,
        total_teachers=summary.total_teachers,
        average_progress_rate=summary.average_progress_rate,
        completed_subjects=summary.count(ProgressBucket.COMPLETED),
        lagging_subjects=summary.count(ProgressBucket.LAGGING),
        ahead_subjects=summary.count(ProgressBucket.AHEAD),
        on_track_subjects=summary.count(ProgressBucket.ON_TRACK),
        completed=details(ProgressBucket.COMPLETED),
        lagging=details(ProgressBucket.LAGGING),
        ahead=details(ProgressBucket.AHEAD),
        on_track=details(ProgressBucket.ON_TRACK),
        teachers=[TeacherDetailSchema.model_validate(t) for t in summary.teachers],
    )


def window_to_schema(window: DivisionWindow) -> DivisionWindowResponse:
    return DivisionWindowResponse(
        division_id=window.division_id,
        semester_id=window.semester_id,
        start=window.start,
        end=window.end,
        subjects=[
            SubjectWindowSchema(
                subject_id=s.subject_id,
                subject_name=s.subject_name,
                teacher_name=s.teacher_name,
                expected_sub_topics=s.progress.expected_sub_topics,
                completed_sub_topics=s.progress.completed_sub_topics,
                completed_lectures=s.progress.completed_lectures,
                lectures_behind=s.progress.lectures_behind,
            )
            for s in window.subjects
        ],
    )


@router.get("/subjects/{subject_id}", response_model=SubjectProgressSchema)
async def get_subject_progress(
    subject_id: UUID, service: ProgressService = Depends(get_progress_service)
) -> SubjectProgressSchema:
    """Progress snapshot for one subject."""
    try:
        progress = await service.subject_progress(subject_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    return SubjectProgressSchema(
        subject_id=progress.subject_id,
        subject_name=progress.subject_name,
        subject_code=progress.subject_code,
        teacher_id=progress.teacher_id,
        teacher_name=progress.teacher_name,
        batch_code=progress.batch_code,
        bucket=classify(progress.snapshot, service.lag_threshold).value,
        snapshot=ProgressSnapshotSchema.model_validate(progress.snapshot),
    )


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    level: OrgLevel = Query(OrgLevel.SCHOOL, description="center, school or division"),
    service: ProgressService = Depends(get_progress_service),
) -> DashboardResponse:
    """Summaries for every unit of a level, over ongoing subjects."""
    summaries = await service.dashboard(level)
    return DashboardResponse(level=level.value, units=[to_schema(s) for s in summaries])


@router.get("/divisions/{division_id}/window", response_model=DivisionWindowResponse)
async def get_division_window(
    division_id: UUID,
    start: date | None = Query(None, alias="from", description="First day (inclusive)"),
    end: date | None = Query(None, alias="to", description="Last day (inclusive)"),
    service: ProgressService = Depends(get_progress_service),
) -> DivisionWindowResponse:
    """Sub-topics planned vs completed per subject of a division's current semester."""
    try:
        window = await service.division_window(division_id, start, end)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    return window_to_schema(window)


@router.get("/divisions/{division_id}/lagging", response_model=DivisionWindowResponse)
async def get_lagging_subjects(
    division_id: UUID,
    start: date | None = Query(None, alias="from", description="First day (inclusive)"),
    end: date | None = Query(None, alias="to", description="Last day (inclusive), default today"),
    service: ProgressService = Depends(get_progress_service),
) -> DivisionWindowResponse:
    """Subjects that completed fewer sub-topics than planned in the window."""
    try:
        window = await service.lagging_subjects(division_id, start, end)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    return window_to_schema(window)


@router.get("/{level}/{unit_id}", response_model=UnitSummarySchema)
async def get_unit_summary(
    level: str, unit_id: UUID, service: ProgressService = Depends(get_progress_service)
) -> UnitSummarySchema:
    """Summary for a single center, school or division."""
    try:
        summary = await service.unit_summary(level, unit_id)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    return to_schema(summary)
