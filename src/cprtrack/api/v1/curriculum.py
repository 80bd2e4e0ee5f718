"""
Curriculum API Endpoints

Import, read and delete a subject's curriculum, and mark sub-topic progress.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cprtrack.api.dependencies import get_clock
from cprtrack.config import settings
from cprtrack.core.clock import Clock
from cprtrack.core.database import get_db
from cprtrack.core.exceptions import NotFoundError
from cprtrack.core.models import CurriculumSubTopic
from cprtrack.core.schemas.curriculum import (
    CurriculumImportRequest,
    CurriculumImportResponse,
    CurriculumSummarySchema,
    CurriculumTreeResponse,
    ModuleSchema,
    SubTopicSchema,
    SubTopicStatusUpdate,
)
from cprtrack.core.validation import ValidationError
from cprtrack.curriculum import CurriculumStore

router = APIRouter()


def get_store(
    db: AsyncSession = Depends(get_db), clock: Clock = Depends(get_clock)
) -> CurriculumStore:
    return CurriculumStore(db, tz=settings.timezone, clock=clock)


@router.put(
    "/subjects/{subject_id}",
    response_model=CurriculumImportResponse,
    status_code=status.HTTP_201_CREATED,
)
async def replace_curriculum(
    subject_id: UUID,
    payload: CurriculumImportRequest,
    store: CurriculumStore = Depends(get_store),
) -> CurriculumImportResponse:
    """Replace a subject's curriculum with the given rows.

    Existing modules, topics and sub-topics (and their progress) are
    discarded. Malformed rows are skipped and counted.
    """
    try:
        result = await store.replace(subject_id, payload.rows)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    return CurriculumImportResponse(
        subject_id=subject_id,
        modules=result.modules,
        topics=result.topics,
        sub_topics=result.sub_topics,
        skipped_rows=result.skipped_rows,
        planned_lectures=result.planned_lectures,
    )


@router.get("/subjects/{subject_id}", response_model=CurriculumTreeResponse)
async def get_curriculum(
    subject_id: UUID, store: CurriculumStore = Depends(get_store)
) -> CurriculumTreeResponse:
    """Get a subject's ordered curriculum tree with status counts."""
    try:
        tree = await store.get_tree(subject_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    return CurriculumTreeResponse(
        subject_id=tree.subject.id,
        subject_name=tree.subject.name,
        modules=[ModuleSchema.model_validate(module) for module in tree.modules],
        summary=CurriculumSummarySchema.model_validate(tree.summary),
    )


@router.delete("/subjects/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_curriculum(subject_id: UUID, store: CurriculumStore = Depends(get_store)) -> None:
    """Delete a subject's whole curriculum."""
    try:
        await store.delete(subject_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.patch("/sub-topics/{sub_topic_id}/status", response_model=SubTopicSchema)
async def update_sub_topic_status(
    sub_topic_id: UUID,
    payload: SubTopicStatusUpdate,
    store: CurriculumStore = Depends(get_store),
) -> CurriculumSubTopic:
    """Mark a sub-topic pending, in progress or completed."""
    try:
        return await store.update_sub_topic_status(sub_topic_id, payload.status)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
