"""Exam authoring, taking and grading schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from cineverse.models.exam import QuestionType


class OptionCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=1000)
    is_correct: bool = False


class QuestionCreate(BaseModel):
    text: str = Field(..., min_length=1)
    type: QuestionType = QuestionType.SINGLE_CHOICE
    points: float = Field(default=1.0, gt=0)
    options: list[OptionCreate] = Field(default_factory=list)


class ExamCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    post_id: UUID | None = None
    is_published: bool = False
    duration_minutes: int | None = Field(default=None, gt=0)
    questions: list[QuestionCreate] = Field(..., min_length=1)


class OptionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    text: str


class OptionAdminOut(OptionOut):
    is_correct: bool


class QuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    text: str
    type: str
    points: float
    position: int
    options: list[OptionOut]


class QuestionAdminOut(QuestionOut):
    options: list[OptionAdminOut]


class ExamOut(BaseModel):
    """Exam as shown to a taker: correctness flags are not included."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str | None = None
    post_id: UUID | None = None
    is_published: bool
    duration_minutes: int | None = None
    questions: list[QuestionOut]


class ExamAdminOut(ExamOut):
    questions: list[QuestionAdminOut]


class AnswerSubmit(BaseModel):
    question_id: UUID
    selected_option_ids: list[UUID] = Field(default_factory=list)
    text_answer: str | None = None


class ExamSubmitRequest(BaseModel):
    answers: list[AnswerSubmit] = Field(default_factory=list)
    time_taken_seconds: int | None = Field(default=None, ge=0)


class AnswerResult(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    question_id: UUID
    selected_option_ids: list[str]
    text_answer: str | None = None
    is_correct: bool | None = None
    points_awarded: float | None = None


class SubmissionResult(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    exam_id: UUID
    user_id: UUID
    score: float
    max_score: float
    status: str
    attempt_count: int
    time_taken_seconds: int | None = None
    submitted_at: datetime
    answers: list[AnswerResult]


class GradeRequest(BaseModel):
    points: float


class AttemptCountUpdate(BaseModel):
    attempt_count: int = Field(..., ge=0)


class ExamListItem(BaseModel):
    """Admin exam listing row with question and submission counts."""

    id: UUID
    title: str
    is_published: bool
    post_id: UUID | None = None
    created_at: datetime
    question_count: int
    submission_count: int


class SubmitterOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str | None = None
    email: str


class SubmissionSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user: SubmitterOut
    score: float
    max_score: float
    status: str
    attempt_count: int
    time_taken_seconds: int | None = None
    submitted_at: datetime
    answers: list[AnswerResult]


class ExamResults(BaseModel):
    exam_id: UUID
    title: str
    max_score: float
    submissions: list[SubmissionSummary]
