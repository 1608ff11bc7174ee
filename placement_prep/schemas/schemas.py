"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Wire names are camelCase (`taskId`, `mcqAnswers`); attributes are snake_case.
"""

from datetime import datetime
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, RootModel, StrictInt, field_validator
from pydantic.alias_generators import to_camel

from placement_prep.models.records import (
    AdminRecord, AlumniRecord, Category, CodingFeedback, PlacementExperienceRecord,
    Progress, StudentRecord, WeeklyContentRecord, WeeklyTaskRecord
)

ROLL_NUMBER_PATTERN = r"^22[A-Z]{3}\d{4}$"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_graduation_year(value: int) -> int:
    current_year = datetime.now().year
    if value < 1900 or value > current_year:
        raise ValueError(f"Graduation year must be between 1900 and {current_year}")
    return value


# ============================================================
# AUTH SCHEMAS
# ============================================================

class StudentRegistration(CamelModel):
    role: Literal["student"]
    name: str = Field(..., min_length=2)
    email: EmailStr
    password: str = Field(..., min_length=6)
    roll_number: str = Field(..., pattern=ROLL_NUMBER_PATTERN)
    branch: str = Field(..., min_length=1)
    school: str = Field(..., min_length=1)
    cgpa: str = Field(..., min_length=1)


class AlumniRegistration(CamelModel):
    role: Literal["alumni"]
    name: str = Field(..., min_length=2)
    email: EmailStr
    password: str = Field(..., min_length=6)
    company: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    graduation_year: int

    @field_validator("graduation_year")
    @classmethod
    def _graduation_year_in_range(cls, value):
        return _check_graduation_year(value)


class RegisterRequest(RootModel):
    """Registration payload; `role` selects the student or alumni field set."""
    root: Annotated[Union[StudentRegistration, AlumniRegistration], Field(discriminator="role")]


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    role: str


class UserResponse(CamelModel):
    """Public view of a user. Role-specific fields are None when not applicable."""
    id: str
    name: str
    email: str
    role: str
    registration_date: Optional[datetime] = None
    roll_number: Optional[str] = None
    branch: Optional[str] = None
    school: Optional[str] = None
    cgpa: Optional[str] = None
    category: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    graduation_year: Optional[int] = None


def user_response(user) -> UserResponse:
    """Public profile for any user record; the password hash never leaves the record."""
    base = {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "registration_date": user.registration_date
    }
    if isinstance(user, StudentRecord):
        return UserResponse(
            **base, roll_number=user.roll_number, branch=user.branch,
            school=user.school, cgpa=user.cgpa, category=user.category
        )
    if isinstance(user, AlumniRecord):
        return UserResponse(
            **base, company=user.company, position=user.position,
            graduation_year=user.graduation_year
        )
    if isinstance(user, AdminRecord):
        return UserResponse(**base)
    raise TypeError(f"Unknown user record: {type(user).__name__}")


class RegisterResponse(CamelModel):
    message: str
    user: UserResponse


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class StudentProfileUpdate(CamelModel):
    role: Literal["student"]
    name: str = Field(..., min_length=2)
    roll_number: str = Field(..., pattern=ROLL_NUMBER_PATTERN)
    branch: str = Field(..., min_length=1)
    school: str = Field(..., min_length=1)
    cgpa: str = Field(..., min_length=1)


class AlumniProfileUpdate(CamelModel):
    role: Literal["alumni"]
    name: str = Field(..., min_length=2)
    company: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    graduation_year: int

    @field_validator("graduation_year")
    @classmethod
    def _graduation_year_in_range(cls, value):
        return _check_graduation_year(value)


class ProfileUpdateRequest(RootModel):
    root: Annotated[Union[StudentProfileUpdate, AlumniProfileUpdate], Field(discriminator="role")]


# ============================================================
# CATEGORY / PROGRESS SCHEMAS
# ============================================================

class CategorySelection(CamelModel):
    category: Category
    reset_progress: Optional[bool] = False


class MarkContentRequest(CamelModel):
    week_number: int
    student_id: str
    completed: bool = True


class MarkResourceRequest(CamelModel):
    week_number: int
    resource_index: int = Field(..., ge=0)
    student_id: str
    completed: bool


class WeekScore(CamelModel):
    week: int
    total_score: int
    mcq_score: int
    coding_score: int


class ProgressSummary(CamelModel):
    category: Optional[str] = None
    total_submissions: int
    avg_mcq_score: float
    avg_coding_score: float
    avg_total_score: float
    weekly_breakdown: List[WeekScore]
    content_completion_percentage: int
    task_completion_percentage: int
    progress: Progress


# ============================================================
# CONTENT / TASK SCHEMAS
# ============================================================

class WeekContentResponse(CamelModel):
    content: WeeklyContentRecord
    resource_completions: List[bool]
    completed: bool


class MCQView(CamelModel):
    question: str
    options: List[str]


class CodingQuestionView(CamelModel):
    question: str
    description: str
    test_cases: List[Dict[str, str]]


class TaskView(CamelModel):
    """A task as shown to a student about to attempt it. No answers, no sample solutions."""
    id: str
    week: int
    category: str
    title: str
    description: str
    deadline: datetime
    mcqs: List[MCQView]
    coding_questions: List[CodingQuestionView]

    @classmethod
    def from_record(cls, task: WeeklyTaskRecord) -> "TaskView":
        return cls(
            id=task.id,
            week=task.week,
            category=task.category,
            title=task.title,
            description=task.description,
            deadline=task.deadline,
            mcqs=[MCQView(question=m.question, options=m.options) for m in task.mcqs],
            coding_questions=[
                CodingQuestionView(
                    question=q.question,
                    description=q.description,
                    test_cases=[tc.model_dump(by_alias=True) for tc in q.test_cases]
                ) for q in task.coding_questions
            ]
        )


class TaskSummary(CamelModel):
    id: str
    week: int
    title: str
    deadline: datetime
    total_score: Optional[int] = None


class TaskBoard(CamelModel):
    category: str
    pending: List[TaskSummary]
    completed: List[TaskSummary]
    expired: List[TaskSummary]


# ============================================================
# SUBMISSION SCHEMAS
# ============================================================

class TaskSubmission(CamelModel):
    """Numbers must arrive as JSON numbers; "1" or true is rejected."""
    task_id: str
    week: StrictInt
    category: str
    mcq_answers: List[StrictInt]
    coding_solutions: List[str]


class GradingResult(CamelModel):
    mcq_score: int
    coding_score: int
    total_score: int
    coding_feedback: List[CodingFeedback]


class SubmissionResponse(CamelModel):
    message: str
    submission: GradingResult


class EvaluateCodeRequest(CamelModel):
    code: str = Field(..., min_length=1)
    question: str = Field(..., min_length=1)


class EvaluateCodeResponse(CamelModel):
    evaluation: str


# ============================================================
# EXPERIENCE SCHEMAS
# ============================================================

class ExperienceCreate(CamelModel):
    company: str = Field(..., min_length=1)
    role: str = Field(..., min_length=1)
    package: Optional[str] = None
    year_of_placement: int
    experience: str = Field(..., min_length=10)
    interview_process: str = Field(..., min_length=10)
    tips: str = Field(..., min_length=10)


class ExperienceResponse(CamelModel):
    message: str
    experience: PlacementExperienceRecord


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(CamelModel):
    message: str
    success: bool = True


__all__ = [
    "RegisterRequest", "StudentRegistration", "AlumniRegistration", "LoginRequest",
    "TokenResponse", "UserResponse", "user_response", "RegisterResponse", "ProfileUpdateRequest",
    "StudentProfileUpdate", "AlumniProfileUpdate", "CategorySelection",
    "MarkContentRequest", "MarkResourceRequest", "WeekScore", "ProgressSummary",
    "WeekContentResponse", "TaskView", "TaskSummary", "TaskBoard", "TaskSubmission",
    "GradingResult", "SubmissionResponse", "EvaluateCodeRequest", "EvaluateCodeResponse",
    "ExperienceCreate", "ExperienceResponse", "MessageResponse",
]
