"""
Progress & Category Service

Owns every mutation of a student's category and progress:
- category selection (optionally wiping progress in the same write)
- week-level content completion
- resource-level completion, which drives week-level completion
- read-side progress summary for the dashboard
"""

import logging
from collections import defaultdict
from typing import List

from pymongo.errors import PyMongoError

from placement_prep.core.config import get_settings
from placement_prep.core.errors import InternalError, NotFoundError
from placement_prep.models.records import StudentRecord, SubmissionRecord
from placement_prep.schemas.schemas import ProgressSummary, WeekScore
from placement_prep.services.mongo_service import PersistenceGateway

logger = logging.getLogger(__name__)


def _average(total: float, count: int) -> float:
    """Mean rounded to one decimal; 0 when there is nothing to average."""
    if count == 0:
        return 0
    return round(total / count, 1)


def _percentage(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return int(round(part * 100 / whole))


class ProgressService:
    """
    Category and progress state for one gateway.
    Authorization (role + ownership) is checked by the routes before any call.
    """

    def __init__(self, gateway: PersistenceGateway, program_weeks: int = None):
        self.gateway = gateway
        self.program_weeks = program_weeks or get_settings().program_weeks

    def select_category(self, student_id: str, category: str, reset_progress: bool = False) -> None:
        """
        Set the student's preparation category.
        With reset_progress the progress returns to its zero state in the same write.
        """
        try:
            updated = self.gateway.users.set_category(student_id, category, reset_progress)
        except PyMongoError as e:
            logger.exception("Category update failed for student %s", student_id)
            raise InternalError("An error occurred while updating category") from e
        if not updated:
            raise NotFoundError("Student not found")
        logger.info("Student %s selected category %r (reset=%s)", student_id, category, reset_progress)

    def mark_content_completed(self, student_id: str, week: int, completed: bool = True) -> None:
        """Add/remove `week` in completedContent. Repeating a call is a no-op."""
        try:
            updated = self.gateway.users.set_content_completion(student_id, week, completed)
        except PyMongoError as e:
            logger.exception("Content completion update failed for student %s", student_id)
            raise InternalError("An error occurred") from e
        if not updated:
            raise NotFoundError("Student not found")

    def mark_resource_completed(self, student_id: str, week: int, resource_index: int,
                                completed: bool) -> StudentRecord:
        """
        Set/clear one resource flag, then recompute whether the week is complete.

        If the week's content cannot be found (no category, content deleted),
        the flag is still written but completedContent is left as it is.
        """
        try:
            student = self.gateway.users.set_resource_completion(student_id, week, resource_index, completed)
            if student is None:
                raise NotFoundError("Student not found")

            content = None
            if student.category:
                content = self.gateway.content.get_week(student.category, week)
            if content is None:
                logger.warning(
                    "No week %d content for category %r; week completion left unchanged",
                    week, student.category
                )
                return student

            self.gateway.users.sync_week_completion(student_id, week, len(content.resources))
            return self.gateway.users.get_student(student_id)
        except PyMongoError as e:
            logger.exception("Resource completion update failed for student %s", student_id)
            raise InternalError("An error occurred") from e

    def summarize(self, student: StudentRecord, submissions: List[SubmissionRecord]) -> ProgressSummary:
        """Dashboard numbers derived from the student's record and submissions."""
        count = len(submissions)
        by_week = defaultdict(lambda: {"total_score": 0, "mcq_score": 0, "coding_score": 0})
        for submission in submissions:
            scores = by_week[submission.week]
            scores["total_score"] += submission.total_score
            scores["mcq_score"] += submission.mcq_score
            scores["coding_score"] += submission.coding_score

        return ProgressSummary(
            category=student.category,
            total_submissions=count,
            avg_mcq_score=_average(sum(s.mcq_score for s in submissions), count),
            avg_coding_score=_average(sum(s.coding_score for s in submissions), count),
            avg_total_score=_average(sum(s.total_score for s in submissions), count),
            weekly_breakdown=[WeekScore(week=week, **by_week[week]) for week in sorted(by_week)],
            content_completion_percentage=_percentage(len(student.progress.completed_content), self.program_weeks),
            task_completion_percentage=_percentage(count, self.program_weeks),
            progress=student.progress
        )
