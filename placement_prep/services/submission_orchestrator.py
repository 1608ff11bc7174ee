"""
Submission Orchestrator - the task submission and grading workflow.

Per (student, task):
    NotSubmitted --submit--> Graded     (submission stored, immutable)
    NotSubmitted --deadline passes--> Expired
    Graded --submit--> redirect to the stored result, nothing written

submit():
1. Load the student; the payload category must equal the stored category
2. Load the task (must exist, same category)
3. Already graded? -> DuplicateSubmissionError (after re-applying progress)
4. Deadline passed? -> TaskExpiredError
5. Grade MCQs (deterministic) and coding answers (judge, partial credit on failure)
6. Store the submission (unique index rejects a concurrent duplicate)
7. Apply the score to the student's progress (idempotent, category-guarded)
"""

import logging
import math
from datetime import datetime, timezone
from typing import Optional

from pymongo.errors import PyMongoError

from placement_prep.core.errors import (
    CategoryMismatchError, DuplicateSubmissionError, InternalError,
    NotFoundError, TaskExpiredError
)
from placement_prep.models.records import SubmissionRecord, WeeklyTaskRecord
from placement_prep.schemas.schemas import GradingResult, TaskSubmission
from placement_prep.services.coding_evaluator import CodingEvaluator
from placement_prep.services.mcq_grader import grade_mcqs
from placement_prep.services.mongo_service import PersistenceGateway

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """0.5 -> 1, 1.5 -> 2, 2.5 -> 3 (Python's round() would give 0, 2, 2)."""
    return int(math.floor(value + 0.5))


def as_utc(moment: datetime) -> datetime:
    """Deadlines stored without tzinfo are UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def is_deadline_passed(task: WeeklyTaskRecord, now: Optional[datetime] = None) -> bool:
    now = now or datetime.now(timezone.utc)
    return now > as_utc(task.deadline)


class TaskSubmissionOrchestrator:
    """
    Validates, grades and stores one task submission.
    """

    def __init__(self, gateway: PersistenceGateway, evaluator: CodingEvaluator):
        self.gateway = gateway
        self.evaluator = evaluator

    def submit(self, student_id: str, payload: TaskSubmission,
               now: Optional[datetime] = None) -> GradingResult:
        """
        Grade and store a submission for the authenticated student.

        Raises:
            CategoryMismatchError: payload/task category differs from the student's
            NotFoundError: student or task missing
            DuplicateSubmissionError: the task was already graded for this student
            TaskExpiredError: the task's deadline has passed
            InternalError: persistence failure
        """
        now = now or datetime.now(timezone.utc)
        try:
            return self._submit(student_id, payload, now)
        except PyMongoError as e:
            logger.exception("Persistence failure while submitting task %s", payload.task_id)
            raise InternalError("An error occurred during submission") from e

    def _submit(self, student_id: str, payload: TaskSubmission, now: datetime) -> GradingResult:
        student = self.gateway.users.get_student(student_id)
        if student is None:
            raise NotFoundError("Student not found")

        if student.category != payload.category:
            raise CategoryMismatchError()

        task = self.gateway.tasks.get_by_id(payload.task_id)
        if task is None:
            raise NotFoundError("Task not found")
        if task.category != payload.category:
            raise CategoryMismatchError()

        existing = self.gateway.submissions.get_for_student_task(student_id, payload.task_id)
        if existing is not None:
            self._apply_progress(existing)
            raise DuplicateSubmissionError(payload.task_id)

        if is_deadline_passed(task, now):
            raise TaskExpiredError()

        mcq_score = grade_mcqs(payload.mcq_answers, task.mcqs)
        coding = self.evaluator.evaluate(task.coding_questions, payload.coding_solutions)
        coding_score = round_half_up(coding.score_sum)
        total_score = mcq_score + coding_score

        record = SubmissionRecord(
            student_id=student_id,
            task_id=payload.task_id,
            week=payload.week,
            category=payload.category,
            submission_date=now,
            mcq_answers=payload.mcq_answers,
            coding_solutions=payload.coding_solutions,
            mcq_score=mcq_score,
            coding_score=coding_score,
            total_score=total_score,
            evaluated=True,
            coding_feedback=coding.feedback
        )
        record.id = self.gateway.submissions.insert(record)
        logger.info(
            "Graded task %s for student %s: mcq=%d coding=%d total=%d",
            payload.task_id, student_id, mcq_score, coding_score, total_score
        )

        self._apply_progress(record)

        return GradingResult(
            mcq_score=mcq_score,
            coding_score=coding_score,
            total_score=total_score,
            coding_feedback=coding.feedback
        )

    def _apply_progress(self, submission: SubmissionRecord) -> None:
        """
        Count the submission into progress.

        Skipped silently when the student's category no longer matches the
        submission's, or when this submission was already counted.
        """
        applied = self.gateway.users.apply_submission(
            student_id=submission.student_id,
            submission_id=submission.id,
            category=submission.category,
            week=submission.week,
            total_score=submission.total_score
        )
        if not applied:
            logger.debug("Progress not updated for submission %s", submission.id)
