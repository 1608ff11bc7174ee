"""
MongoDB Service - typed accessors over the portal's collections.

Collections in this database:
1. users                - students, alumni and admins (discriminated by `role`)
2. weeklyContent        - per-category weekly learning resources (read-only here)
3. weeklyTasks          - per-category weekly assessments (read-only here)
4. submissions          - graded task submissions, one per (studentId, taskId)
5. placementExperiences - alumni interview reports

Progress mutations are single field-level updates ($inc, $set, $addToSet,
$pull, $unset) against the student document, never read-modify-write of the
whole `progress` object, so concurrent requests by the same student do not
lose each other's updates.
"""

import logging
import re
from datetime import datetime, timezone
from typing import List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from placement_prep.core.errors import DuplicateEmailError, DuplicateSubmissionError
from placement_prep.db.mongodb import COLLECTIONS, get_collection
from placement_prep.models.records import (
    PlacementExperienceRecord, StudentRecord, SubmissionRecord,
    WeeklyContentRecord, WeeklyTaskRecord, parse_user, resource_key, zero_progress
)

logger = logging.getLogger(__name__)


# ============================================================
# HELPER: identifier handling
# ============================================================

def to_object_id(value: str) -> Optional[ObjectId]:
    """Parse a 24-hex id; None when malformed (callers treat that as not found)."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================
# USERS COLLECTION
# ============================================================

class UserService:
    """
    Handles users of every role.
    Student progress lives inside the student document under `progress`.
    """

    def __init__(self, collection: Collection = None):
        self.collection: Collection = collection if collection is not None else get_collection(COLLECTIONS["users"])

    def insert(self, doc: dict) -> str:
        """
        Insert a new user document (password already hashed).

        Raises:
            DuplicateEmailError: the unique email index rejected the insert
        """
        doc = dict(doc)
        doc.setdefault("registrationDate", utcnow())
        if doc.get("role") == "student":
            doc.setdefault("category", None)
            doc.setdefault("progress", zero_progress())
            doc.setdefault("appliedSubmissionIds", [])
        try:
            result = self.collection.insert_one(doc)
        except DuplicateKeyError as e:
            raise DuplicateEmailError() from e
        return str(result.inserted_id)

    def find_by_email(self, email: str):
        return parse_user(self.collection.find_one({"email": email}))

    def find_raw_by_email(self, email: str) -> Optional[dict]:
        """Raw document, including the password hash. Only for login."""
        return self.collection.find_one({"email": email})

    def get_by_id(self, user_id: str):
        oid = to_object_id(user_id)
        if oid is None:
            return None
        return parse_user(self.collection.find_one({"_id": oid}))

    def get_student(self, student_id: str) -> Optional[StudentRecord]:
        oid = to_object_id(student_id)
        if oid is None:
            return None
        return parse_user(self.collection.find_one({"_id": oid, "role": "student"}))

    def update_profile(self, user_id: str, role: str, fields: dict) -> bool:
        """Set profile fields. Role, email and password are never touched here."""
        oid = to_object_id(user_id)
        if oid is None:
            return False
        fields = {k: v for k, v in fields.items() if k not in ("role", "email", "password", "progress")}
        result = self.collection.update_one({"_id": oid, "role": role}, {"$set": fields})
        return result.matched_count > 0

    def set_category(self, student_id: str, category: str, reset_progress: bool) -> bool:
        """
        Write the student's category, optionally wiping progress.

        Both happen in one document update, so a reader never sees the new
        category with the old progress (or the reverse). `appliedSubmissionIds`
        is kept: a submission counted before a reset is never counted again.
        """
        oid = to_object_id(student_id)
        if oid is None:
            return False
        changes = {"category": category}
        if reset_progress:
            changes["progress"] = zero_progress()
        result = self.collection.update_one({"_id": oid, "role": "student"}, {"$set": changes})
        return result.matched_count > 0

    def apply_submission(self, student_id: str, submission_id: str, category: str,
                         week: int, total_score: int) -> bool:
        """
        Count a graded submission into the student's progress.

        The filter only matches while the student is still in `category` and
        the submission has not been applied yet, which makes this safe to
        retry. Returns False when nothing was written.
        """
        oid = to_object_id(student_id)
        if oid is None:
            return False
        result = self.collection.update_one(
            {
                "_id": oid,
                "role": "student",
                "category": category,
                "appliedSubmissionIds": {"$ne": submission_id}
            },
            {
                "$inc": {"progress.completedTasks": 1},
                "$set": {f"progress.weeklyScores.{week}": total_score},
                "$addToSet": {"appliedSubmissionIds": submission_id}
            }
        )
        return result.modified_count > 0

    def set_content_completion(self, student_id: str, week: int, completed: bool) -> bool:
        """Add/remove a week in `progress.completedContent`. Idempotent."""
        oid = to_object_id(student_id)
        if oid is None:
            return False
        if completed:
            update = {"$addToSet": {"progress.completedContent": week}}
        else:
            update = {"$pull": {"progress.completedContent": week}}
        result = self.collection.update_one({"_id": oid, "role": "student"}, update)
        return result.matched_count > 0

    def set_resource_completion(self, student_id: str, week: int, resource_index: int,
                                completed: bool) -> Optional[StudentRecord]:
        """Set or clear one resource flag. Returns the updated student."""
        oid = to_object_id(student_id)
        if oid is None:
            return None
        field = f"progress.resourceCompletions.{resource_key(week, resource_index)}"
        if completed:
            update = {"$set": {field: True}}
        else:
            update = {"$unset": {field: ""}}
        doc = self.collection.find_one_and_update(
            {"_id": oid, "role": "student"},
            update,
            return_document=ReturnDocument.AFTER
        )
        return parse_user(doc)

    def sync_week_completion(self, student_id: str, week: int, resource_count: int) -> None:
        """
        Recompute whether `week` belongs in `completedContent`.

        The resource flags are tested in the update filters themselves, so the
        decision is made against the document as it is at write time.
        """
        oid = to_object_id(student_id)
        if oid is None:
            return
        flags = [f"progress.resourceCompletions.{resource_key(week, i)}" for i in range(resource_count)]

        all_done = {"_id": oid, "role": "student"}
        all_done.update({flag: True for flag in flags})
        self.collection.update_one(all_done, {"$addToSet": {"progress.completedContent": week}})

        if flags:
            self.collection.update_one(
                {"_id": oid, "role": "student", "$or": [{flag: {"$ne": True}} for flag in flags]},
                {"$pull": {"progress.completedContent": week}}
            )


# ============================================================
# WEEKLY CONTENT COLLECTION
# ============================================================

class WeeklyContentService:
    """Read-only access to weekly learning content."""

    def __init__(self, collection: Collection = None):
        self.collection: Collection = collection if collection is not None else get_collection(COLLECTIONS["weekly_content"])

    def get_week(self, category: str, week: int) -> Optional[WeeklyContentRecord]:
        doc = self.collection.find_one({"category": category, "week": week})
        return WeeklyContentRecord.model_validate(doc) if doc else None

    def list_for_category(self, category: str) -> List[WeeklyContentRecord]:
        cursor = self.collection.find({"category": category}).sort("week", ASCENDING)
        return [WeeklyContentRecord.model_validate(doc) for doc in cursor]


# ============================================================
# WEEKLY TASKS COLLECTION
# ============================================================

class WeeklyTaskService:
    """Read-only access to weekly tasks."""

    def __init__(self, collection: Collection = None):
        self.collection: Collection = collection if collection is not None else get_collection(COLLECTIONS["weekly_tasks"])

    def get_by_id(self, task_id: str) -> Optional[WeeklyTaskRecord]:
        oid = to_object_id(task_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid})
        return WeeklyTaskRecord.model_validate(doc) if doc else None

    def list_for_category(self, category: str) -> List[WeeklyTaskRecord]:
        cursor = self.collection.find({"category": category}).sort("week", ASCENDING)
        return [WeeklyTaskRecord.model_validate(doc) for doc in cursor]


# ============================================================
# SUBMISSIONS COLLECTION
# ============================================================

class SubmissionService:
    """
    Graded submissions. Written once, never updated.
    """

    def __init__(self, collection: Collection = None):
        self.collection: Collection = collection if collection is not None else get_collection(COLLECTIONS["submissions"])

    def insert(self, record: SubmissionRecord) -> str:
        """
        Store a graded submission.

        Raises:
            DuplicateSubmissionError: (studentId, taskId) already has a submission
        """
        doc = record.model_dump(by_alias=True, exclude={"id"})
        doc["studentId"] = to_object_id(record.student_id)
        doc["taskId"] = to_object_id(record.task_id)
        try:
            result = self.collection.insert_one(doc)
        except DuplicateKeyError as e:
            raise DuplicateSubmissionError(record.task_id) from e
        return str(result.inserted_id)

    def get_for_student_task(self, student_id: str, task_id: str) -> Optional[SubmissionRecord]:
        student_oid, task_oid = to_object_id(student_id), to_object_id(task_id)
        if student_oid is None or task_oid is None:
            return None
        doc = self.collection.find_one({"studentId": student_oid, "taskId": task_oid})
        return SubmissionRecord.model_validate(doc) if doc else None

    def list_for_student(self, student_id: str) -> List[SubmissionRecord]:
        oid = to_object_id(student_id)
        if oid is None:
            return []
        cursor = self.collection.find({"studentId": oid}).sort("submissionDate", ASCENDING)
        return [SubmissionRecord.model_validate(doc) for doc in cursor]


# ============================================================
# PLACEMENT EXPERIENCES COLLECTION
# ============================================================

class PlacementExperienceService:
    """Alumni placement experiences. Created once, never updated."""

    def __init__(self, collection: Collection = None):
        self.collection: Collection = collection if collection is not None else get_collection(COLLECTIONS["experiences"])

    def insert(self, alumni_id: str, alumni_name: str, data: dict) -> PlacementExperienceRecord:
        doc = {
            **data,
            "alumniId": to_object_id(alumni_id),
            "alumniName": alumni_name,
            "createdAt": utcnow()
        }
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return PlacementExperienceRecord.model_validate(doc)

    def list_all(self) -> List[PlacementExperienceRecord]:
        cursor = self.collection.find({}).sort("createdAt", DESCENDING)
        return [PlacementExperienceRecord.model_validate(doc) for doc in cursor]

    def search_by_company(self, company: str) -> List[PlacementExperienceRecord]:
        """Case-insensitive substring match on company name."""
        cursor = self.collection.find(
            {"company": {"$regex": re.escape(company), "$options": "i"}}
        ).sort("createdAt", DESCENDING)
        return [PlacementExperienceRecord.model_validate(doc) for doc in cursor]


# ============================================================
# GATEWAY: all collections behind one dependency
# ============================================================

class PersistenceGateway:
    """
    Bundles the collection services.

    Usage:
        gateway = get_gateway()
        gateway.users.get_student(student_id)
    """

    def __init__(self, users: UserService, content: WeeklyContentService, tasks: WeeklyTaskService,
                 submissions: SubmissionService, experiences: PlacementExperienceService):
        self.users = users
        self.content = content
        self.tasks = tasks
        self.submissions = submissions
        self.experiences = experiences

    @classmethod
    def from_collections(cls, collections: dict) -> "PersistenceGateway":
        """Build from a {COLLECTIONS key: Collection} mapping (tests pass in-memory ones)."""
        return cls(
            users=UserService(collections["users"]),
            content=WeeklyContentService(collections["weekly_content"]),
            tasks=WeeklyTaskService(collections["weekly_tasks"]),
            submissions=SubmissionService(collections["submissions"]),
            experiences=PlacementExperienceService(collections["experiences"])
        )


_gateway: PersistenceGateway = None


def get_gateway() -> PersistenceGateway:
    """Get or create the gateway (singleton pattern). FastAPI dependency."""
    global _gateway
    if _gateway is None:
        _gateway = PersistenceGateway(
            users=UserService(),
            content=WeeklyContentService(),
            tasks=WeeklyTaskService(),
            submissions=SubmissionService(),
            experiences=PlacementExperienceService()
        )
    return _gateway
