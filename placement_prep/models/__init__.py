"""
Models module - internal record models for MongoDB documents.

Difference from schemas:
- Models: what the portal stores (camelCase documents, typed here)
- Schemas: API contract (what client sends/receives)
"""

from placement_prep.models.records import (
    Category, Progress, StudentRecord, AlumniRecord, AdminRecord,
    UserRecord, parse_user, zero_progress, resource_key,
    WeeklyContentRecord, WeeklyTaskRecord, MCQQuestion, CodingQuestion,
    CodingFeedback, IdentifiedIssue, SubmissionRecord, PlacementExperienceRecord
)

__all__ = [
    "Category", "Progress", "StudentRecord", "AlumniRecord", "AdminRecord",
    "UserRecord", "parse_user", "zero_progress", "resource_key",
    "WeeklyContentRecord", "WeeklyTaskRecord", "MCQQuestion", "CodingQuestion",
    "CodingFeedback", "IdentifiedIssue", "SubmissionRecord", "PlacementExperienceRecord"
]
