"""
User & Student Routes

PUT /user/profile - Update own profile (role-specific fields)
POST /student/category - Select preparation category (optionally resetting progress)
GET /student/progress - Progress summary for the dashboard
"""

from fastapi import APIRouter, Depends

from placement_prep.api.deps import get_progress_service
from placement_prep.core.auth import get_current_student, get_current_user
from placement_prep.core.errors import ForbiddenError, NotFoundError
from placement_prep.schemas.schemas import (
    CategorySelection, MessageResponse, ProfileUpdateRequest, ProgressSummary
)
from placement_prep.services.mongo_service import PersistenceGateway, get_gateway
from placement_prep.services.progress_service import ProgressService

router = APIRouter(tags=["Users"])


@router.put("/user/profile", response_model=MessageResponse)
async def update_profile(
    payload: ProfileUpdateRequest,
    user: dict = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Update the caller's own profile. The payload role must match the caller's role."""
    data = payload.root
    if data.role != user["role"]:
        raise ForbiddenError("Cannot change user role")

    fields = data.model_dump(by_alias=True, exclude={"role"})
    if not gateway.users.update_profile(user["user_id"], user["role"], fields):
        raise NotFoundError("User not found")

    return MessageResponse(message="Profile updated successfully")


@router.post("/student/category", response_model=MessageResponse)
async def select_category(
    data: CategorySelection,
    student: dict = Depends(get_current_student),
    progress: ProgressService = Depends(get_progress_service)
):
    """
    Select the preparation category.

    Clients send resetProgress=true when switching away from a previous
    category; progress is then wiped in the same write as the category.
    """
    progress.select_category(student["user_id"], data.category.value, bool(data.reset_progress))
    return MessageResponse(message="Category updated successfully")


@router.get("/student/progress", response_model=ProgressSummary)
async def get_progress(
    student: dict = Depends(get_current_student),
    gateway: PersistenceGateway = Depends(get_gateway),
    progress: ProgressService = Depends(get_progress_service)
):
    """Scores, averages and completion percentages for the caller."""
    record = gateway.users.get_student(student["user_id"])
    if record is None:
        raise NotFoundError("Student not found")
    submissions = gateway.submissions.list_for_student(student["user_id"])
    return progress.summarize(record, submissions)
