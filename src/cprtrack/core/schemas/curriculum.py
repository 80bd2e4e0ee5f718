"""
Curriculum Pydantic Schemas

Request and response models for curriculum API endpoints.
"""

from datetime import date
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from cprtrack.core.models import SubTopicStatus


class CurriculumImportRequest(BaseModel):
    """Curriculum rows to replace a subject's tree with.

    Rows are loose mappings (snake_case keys or sheet headers such as
    "Sub Topic"); malformed rows are skipped rather than rejected.
    """

    rows: list[dict[str, Any]] = Field(..., min_length=1)


class CurriculumImportResponse(BaseModel):
    """Counts from a curriculum import."""

    model_config = ConfigDict(from_attributes=True)

    subject_id: UUID
    modules: int
    topics: int
    sub_topics: int
    skipped_rows: int
    planned_lectures: int


class SubTopicSchema(BaseModel):
    """Curriculum sub-topic response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    order: int
    lecture_number: int
    status: SubTopicStatus
    planned_start_date: date | None = None
    planned_end_date: date | None = None
    actual_start_date: date | None = None
    actual_end_date: date | None = None


class TopicSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    order: int
    sub_topics: list[SubTopicSchema] = []


class ModuleSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    order: int
    topics: list[TopicSchema] = []


class CurriculumSummarySchema(BaseModel):
    """Status counts over a subject's sub-topics."""

    model_config = ConfigDict(from_attributes=True)

    total_modules: int
    total_topics: int
    total_sub_topics: int
    total_lectures: int
    completed_sub_topics: int
    in_progress_sub_topics: int
    pending_sub_topics: int
    completion_percentage: int


class CurriculumTreeResponse(BaseModel):
    """A subject's full curriculum."""

    subject_id: UUID
    subject_name: str
    modules: list[ModuleSchema]
    summary: CurriculumSummarySchema


class SubTopicStatusUpdate(BaseModel):
    status: SubTopicStatus
