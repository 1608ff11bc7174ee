"""
Internal record models - typed views over MongoDB documents.

Documents keep the camelCase field names the portal has always stored
(`rollNumber`, `progress.completedTasks`, ...). Models expose snake_case
attributes and read/write the camelCase names through aliases.

Users live in one collection discriminated by `role`; parse them with
`parse_user()` and branch on the concrete class at every read site.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel


class Category(str, Enum):
    dream = "Dream Package"
    super_dream = "Super Dream Package"
    higher_studies = "Higher Studies"


class ResourceType(str, Enum):
    video = "video"
    notes = "notes"
    link = "link"


def _stringify_id(value):
    if isinstance(value, ObjectId):
        return str(value)
    return value


class DocumentModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        use_enum_values=True,
    )


class StoredDocument(DocumentModel):
    id: Optional[str] = Field(None, alias="_id")

    @field_validator("id", mode="before")
    @classmethod
    def _object_id_to_str(cls, value):
        return _stringify_id(value)


# ============================================================
# USERS
# ============================================================

def resource_key(week: int, resource_index: int) -> str:
    """Key of a resource inside `progress.resourceCompletions`."""
    return f"{week}-{resource_index}"


class Progress(DocumentModel):
    completed_tasks: int = 0
    weekly_scores: Dict[str, int] = Field(default_factory=dict)
    completed_content: List[int] = Field(default_factory=list)
    resource_completions: Dict[str, bool] = Field(default_factory=dict)

    def is_resource_completed(self, week: int, resource_index: int) -> bool:
        return bool(self.resource_completions.get(resource_key(week, resource_index)))


def zero_progress() -> dict:
    """The progress document a new (or reset) student starts from."""
    return Progress().model_dump(by_alias=True)


class BaseUser(StoredDocument):
    name: str
    email: str
    password_hash: Optional[str] = Field(None, alias="password", exclude=True, repr=False)
    registration_date: Optional[datetime] = None


class StudentRecord(BaseUser):
    role: Literal["student"] = "student"
    roll_number: str
    branch: str
    school: str
    cgpa: str
    category: Optional[Category] = None
    progress: Progress = Field(default_factory=Progress)

    @field_validator("progress", mode="before")
    @classmethod
    def _default_progress(cls, value):
        return value or {}


class AlumniRecord(BaseUser):
    role: Literal["alumni"] = "alumni"
    company: str
    position: str
    graduation_year: int


class AdminRecord(BaseUser):
    role: Literal["admin"] = "admin"


UserRecord = Annotated[
    Union[StudentRecord, AlumniRecord, AdminRecord],
    Field(discriminator="role")
]

_user_adapter = TypeAdapter(UserRecord)


def parse_user(doc: Optional[dict]) -> Optional[Union[StudentRecord, AlumniRecord, AdminRecord]]:
    """Build the role-specific record for a users document."""
    if doc is None:
        return None
    return _user_adapter.validate_python(doc)


# ============================================================
# WEEKLY CONTENT / TASKS
# ============================================================

class Resource(DocumentModel):
    type: ResourceType
    title: str
    url: str


class WeeklyContentRecord(StoredDocument):
    week: int
    category: str
    title: str
    description: str = ""
    resources: List[Resource] = Field(default_factory=list)


class MCQQuestion(DocumentModel):
    question: str
    options: List[str] = Field(..., min_length=2)
    correct_answer: int


class CodeTestCase(DocumentModel):
    input: str
    expected_output: str


class CodingQuestion(DocumentModel):
    question: str
    description: str = ""
    test_cases: List[CodeTestCase] = Field(default_factory=list)
    sample_solution: Optional[str] = None


class WeeklyTaskRecord(StoredDocument):
    week: int
    category: str
    title: str
    description: str = ""
    deadline: datetime
    mcqs: List[MCQQuestion] = Field(default_factory=list)
    coding_questions: List[CodingQuestion] = Field(default_factory=list)


# ============================================================
# SUBMISSIONS
# ============================================================

class IdentifiedIssue(DocumentModel):
    type: str = "correctness"
    severity: str = "low"
    description: str = ""


class CodingFeedback(DocumentModel):
    question_index: int
    feedback: str
    score: float = Field(..., ge=0, le=1)
    passes_all_tests: bool
    performance: float = 0
    readability: float = 0
    correctness: float = 0
    identified_issues: List[IdentifiedIssue] = Field(default_factory=list)


class SubmissionRecord(StoredDocument):
    student_id: str
    task_id: str
    week: int
    category: str
    submission_date: datetime
    mcq_answers: List[int] = Field(default_factory=list)
    coding_solutions: List[str] = Field(default_factory=list)
    mcq_score: int = 0
    coding_score: int = 0
    total_score: int = 0
    evaluated: bool = False
    coding_feedback: List[CodingFeedback] = Field(default_factory=list)

    @field_validator("student_id", "task_id", mode="before")
    @classmethod
    def _refs_to_str(cls, value):
        return _stringify_id(value)


# ============================================================
# PLACEMENT EXPERIENCES
# ============================================================

class PlacementExperienceRecord(StoredDocument):
    alumni_id: str
    alumni_name: str
    company: str
    role: str
    package: Optional[str] = None
    year_of_placement: int
    experience: str
    interview_process: str
    tips: str
    created_at: datetime

    @field_validator("alumni_id", mode="before")
    @classmethod
    def _ref_to_str(cls, value):
        return _stringify_id(value)
