"""
Content Routes

GET /content - Weekly content for a category (defaults to the student's own)
GET /content/{week} - One week of content with the student's resource flags
POST /content/mark-completed - Mark a week's content as completed
POST /content/mark-resource - Mark/unmark a single resource
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from placement_prep.api.deps import get_progress_service
from placement_prep.core.auth import ensure_owner, get_current_student, get_current_user
from placement_prep.core.errors import NotFoundError, PayloadValidationError
from placement_prep.models.records import StudentRecord, WeeklyContentRecord
from placement_prep.schemas.schemas import (
    MarkContentRequest, MarkResourceRequest, MessageResponse, WeekContentResponse
)
from placement_prep.services.mongo_service import PersistenceGateway, get_gateway
from placement_prep.services.progress_service import ProgressService

router = APIRouter(prefix="/content", tags=["Content"])


def resolve_category(category: Optional[str], user: dict, gateway: PersistenceGateway) -> str:
    """Explicit ?category= wins; otherwise a student's stored category."""
    if category:
        return category
    record = gateway.users.get_by_id(user["user_id"])
    if isinstance(record, StudentRecord) and record.category:
        return record.category
    raise PayloadValidationError("Category is required")


@router.get("", response_model=List[WeeklyContentRecord])
async def list_content(
    category: Optional[str] = Query(None),
    user: dict = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """All weeks of content for a category, in week order."""
    return gateway.content.list_for_category(resolve_category(category, user, gateway))


@router.get("/{week}", response_model=WeekContentResponse)
async def get_week_content(
    week: int,
    student: dict = Depends(get_current_student),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """One week of the student's category, with per-resource completion flags."""
    record = gateway.users.get_student(student["user_id"])
    if record is None:
        raise NotFoundError("Student not found")
    if not record.category:
        raise PayloadValidationError("Select a category first")

    content = gateway.content.get_week(record.category, week)
    if content is None:
        raise NotFoundError("Content not found")

    return WeekContentResponse(
        content=content,
        resource_completions=[
            record.progress.is_resource_completed(week, index) for index in range(len(content.resources))
        ],
        completed=week in record.progress.completed_content
    )


@router.post("/mark-completed", response_model=MessageResponse)
async def mark_content_completed(
    data: MarkContentRequest,
    student: dict = Depends(get_current_student),
    progress: ProgressService = Depends(get_progress_service)
):
    """Mark a whole week's content as completed (or not, with completed=false)."""
    ensure_owner(student, data.student_id)
    progress.mark_content_completed(data.student_id, data.week_number, data.completed)
    return MessageResponse(message="Content marked as completed" if data.completed else "Content marked as not completed")


@router.post("/mark-resource", response_model=MessageResponse)
async def mark_resource_completed(
    data: MarkResourceRequest,
    student: dict = Depends(get_current_student),
    progress: ProgressService = Depends(get_progress_service)
):
    """Toggle one resource; the week's completion is recomputed afterwards."""
    ensure_owner(student, data.student_id)
    progress.mark_resource_completed(data.student_id, data.week_number, data.resource_index, data.completed)
    return MessageResponse(message="Resource marked as completed" if data.completed else "Resource marked as not completed")
