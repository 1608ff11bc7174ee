"""
Task & Submission Routes

GET /tasks - Weekly tasks for a category (defaults to the student's own)
GET /tasks/board - Student's tasks split into pending / completed / expired
GET /tasks/{task_id} - Enter a task (redirects to the result if already submitted)
POST /submit - Submit answers for grading
GET /submissions - Student's graded submissions
GET /submissions/{task_id} - One graded submission (the result page)
POST /evaluate-code - Advisory free-text review of a code snippet
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from placement_prep.api.deps import get_submission_orchestrator
from placement_prep.api.routes.content_routes import resolve_category
from placement_prep.core.auth import get_current_student, get_current_user
from placement_prep.core.errors import (
    CategoryMismatchError, DuplicateSubmissionError, InternalError, NotFoundError,
    PayloadValidationError, TaskExpiredError
)
from placement_prep.models.records import SubmissionRecord
from placement_prep.schemas.schemas import (
    EvaluateCodeRequest, EvaluateCodeResponse, SubmissionResponse, TaskBoard,
    TaskSubmission, TaskSummary, TaskView
)
from placement_prep.services.coding_evaluator import review_code
from placement_prep.services.llm_client import CodeJudge, get_code_judge
from placement_prep.services.mongo_service import PersistenceGateway, get_gateway
from placement_prep.services.submission_orchestrator import TaskSubmissionOrchestrator, is_deadline_passed

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Tasks"])


@router.get("/tasks", response_model=List[TaskView])
async def list_tasks(
    category: Optional[str] = Query(None),
    user: dict = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """All weekly tasks for a category, in week order, without answers."""
    tasks = gateway.tasks.list_for_category(resolve_category(category, user, gateway))
    return [TaskView.from_record(task) for task in tasks]


@router.get("/tasks/board", response_model=TaskBoard)
async def task_board(
    student: dict = Depends(get_current_student),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Split the student's category tasks by state."""
    record = gateway.users.get_student(student["user_id"])
    if record is None:
        raise NotFoundError("Student not found")
    if not record.category:
        raise PayloadValidationError("Select a category first")

    scores = {s.task_id: s.total_score for s in gateway.submissions.list_for_student(student["user_id"])}
    now = datetime.now(timezone.utc)
    board = TaskBoard(category=record.category, pending=[], completed=[], expired=[])

    for task in gateway.tasks.list_for_category(record.category):
        summary = TaskSummary(
            id=task.id, week=task.week, title=task.title,
            deadline=task.deadline, total_score=scores.get(task.id)
        )
        if task.id in scores:
            board.completed.append(summary)
        elif is_deadline_passed(task, now):
            board.expired.append(summary)
        else:
            board.pending.append(summary)

    return board


@router.get("/tasks/{task_id}", response_model=TaskView)
async def enter_task(
    task_id: str,
    student: dict = Depends(get_current_student),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """The task as the student attempts it. Already submitted -> redirect to the result."""
    task = gateway.tasks.get_by_id(task_id)
    if task is None:
        raise NotFoundError("Task not found")

    record = gateway.users.get_student(student["user_id"])
    if record is None or record.category != task.category:
        raise CategoryMismatchError()

    if gateway.submissions.get_for_student_task(student["user_id"], task_id) is not None:
        raise DuplicateSubmissionError(task_id)

    if is_deadline_passed(task):
        raise TaskExpiredError()

    return TaskView.from_record(task)


# Plain `def`: FastAPI runs it in the threadpool, the judge calls block.
@router.post("/submit", response_model=SubmissionResponse, status_code=201)
def submit_task(
    payload: TaskSubmission,
    student: dict = Depends(get_current_student),
    orchestrator: TaskSubmissionOrchestrator = Depends(get_submission_orchestrator)
):
    """
    Grade and store a task submission.

    MCQs are graded positionally, coding answers by the judge. A second
    submission for the same task redirects to the stored result.
    """
    result = orchestrator.submit(student["user_id"], payload)
    return SubmissionResponse(message="Submission successful", submission=result)


@router.get("/submissions", response_model=List[SubmissionRecord])
async def list_submissions(
    student: dict = Depends(get_current_student),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """All of the caller's graded submissions."""
    return gateway.submissions.list_for_student(student["user_id"])


@router.get("/submissions/{task_id}", response_model=SubmissionRecord)
async def get_submission(
    task_id: str,
    student: dict = Depends(get_current_student),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """The caller's stored result for one task."""
    submission = gateway.submissions.get_for_student_task(student["user_id"], task_id)
    if submission is None:
        raise NotFoundError("Submission not found")
    return submission


@router.post("/evaluate-code", response_model=EvaluateCodeResponse)
def evaluate_code(
    data: EvaluateCodeRequest,
    user: dict = Depends(get_current_user),
    judge: CodeJudge = Depends(get_code_judge)
):
    """Free-text feedback before submitting. Not part of grading."""
    try:
        evaluation = review_code(judge, data.code, data.question)
    except Exception as e:
        logger.exception("Code evaluation failed")
        raise InternalError("An error occurred during code evaluation") from e
    return EvaluateCodeResponse(evaluation=evaluation)
