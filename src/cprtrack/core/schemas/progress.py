"""
Progress Pydantic Schemas

Response models for progress and dashboard endpoints.
"""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ProgressSnapshotSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    expected_completion_lecture: int
    actual_completion_lecture: float
    completion_lag: float = Field(description="Positive = behind schedule")
    completion_percentage: int
    punctuality_issue_count: int
    punctuality_issue_percentage: float
    has_curriculum_data: bool


class SubjectProgressSchema(BaseModel):
    """Progress of one subject."""

    model_config = ConfigDict(from_attributes=True)

    subject_id: UUID
    subject_name: str
    subject_code: str
    teacher_id: UUID
    teacher_name: str
    batch_code: str
    bucket: str
    snapshot: ProgressSnapshotSchema


class SubjectDetailSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    subject_name: str
    teacher_name: str
    batch_code: str
    completion_percentage: int
    completion_lag: float


class TeacherDetailSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    teacher_name: str
    subject_name: str
    batch_code: str


class UnitSummarySchema(BaseModel):
    """Rolled-up progress for one center, school or division."""

    unit_id: UUID
    unit_name: str
    level: str
    total_subjects: int
    subjects_without_curriculum: int
    total_teachers: int
    average_progress_rate: int
    completed_subjects: int
    lagging_subjects: int
    ahead_subjects: int
    on_track_subjects: int
    completed: list[SubjectDetailSchema]
    lagging: list[SubjectDetailSchema]
    ahead: list[SubjectDetailSchema]
    on_track: list[SubjectDetailSchema]
    teachers: list[TeacherDetailSchema]


class DashboardResponse(BaseModel):
    level: str
    units: list[UnitSummarySchema]


class SubjectWindowSchema(BaseModel):
    """Sub-topics planned vs completed for one subject within a window."""

    subject_id: UUID
    subject_name: str
    teacher_name: str
    expected_sub_topics: int
    completed_sub_topics: int
    completed_lectures: float
    lectures_behind: float = Field(description="Positive = behind schedule")


class DivisionWindowResponse(BaseModel):
    division_id: UUID
    semester_id: UUID
    start: date
    end: date
    subjects: list[SubjectWindowSchema]
