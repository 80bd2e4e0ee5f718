"""Pydantic schemas for API validation."""

from .curriculum import (
    CurriculumImportRequest,
    CurriculumImportResponse,
    CurriculumSummarySchema,
    CurriculumTreeResponse,
    ModuleSchema,
    SubTopicSchema,
    SubTopicStatusUpdate,
    TopicSchema,
)
from .progress import (
    DashboardResponse,
    ProgressSnapshotSchema,
    SubjectDetailSchema,
    SubjectProgressSchema,
    TeacherDetailSchema,
    UnitSummarySchema,
)
from .timetable import (
    ClassSessionSchema,
    ClassSessionUpdate,
    WeeklyScheduleCreate,
    WeeklyScheduleResponse,
)

__all__ = [
    # Curriculum
    "CurriculumImportRequest",
    "CurriculumImportResponse",
    "CurriculumSummarySchema",
    "CurriculumTreeResponse",
    "ModuleSchema",
    "TopicSchema",
    "SubTopicSchema",
    "SubTopicStatusUpdate",
    # Timetable
    "WeeklyScheduleCreate",
    "WeeklyScheduleResponse",
    "ClassSessionSchema",
    "ClassSessionUpdate",
    # Progress
    "ProgressSnapshotSchema",
    "SubjectProgressSchema",
    "SubjectDetailSchema",
    "TeacherDetailSchema",
    "UnitSummarySchema",
    "DashboardResponse",
]
