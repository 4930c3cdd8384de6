"""Exam endpoints for takers and graders."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from cineverse.core.dependencies import get_current_user, get_optional_user, require_roles
from cineverse.db.session import get_db
from cineverse.models.user import User, UserRole
from cineverse.schemas.exam import (
    AttemptCountUpdate,
    ExamAdminOut,
    ExamCreate,
    ExamListItem,
    ExamOut,
    ExamResults,
    ExamSubmitRequest,
    GradeRequest,
    SubmissionResult,
    SubmissionSummary,
)
from cineverse.services.exams import (
    create_exam,
    delete_exam,
    get_exam,
    get_exam_results,
    get_submission,
    grade_answer,
    is_admin,
    list_exams_for_admin,
    submit_exam,
    update_attempt_count,
)

router = APIRouter(tags=["Exams"])

require_exam_admin = require_roles(UserRole.SUPER_ADMIN, UserRole.USER_ADMIN)
require_exam_owner = require_roles(UserRole.SUPER_ADMIN)
# Results are hidden from everyone else, so other roles get 404 rather than 403
require_results_viewer = require_roles(UserRole.SUPER_ADMIN, conceal=True)


@router.post(
    "/admin/exams",
    response_model=ExamAdminOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create an exam",
    tags=["Admin - Exams"],
)
async def create(
    request_data: ExamCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_exam_admin),
) -> ExamAdminOut:
    exam = create_exam(db, current_user, request_data)
    return ExamAdminOut.model_validate(exam)


@router.get(
    "/exams/{exam_id}",
    response_model=None,
    summary="Get an exam",
    description="Admins see which options are correct; takers do not.",
)
async def read_exam(
    exam_id: UUID,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
) -> ExamAdminOut | ExamOut:
    exam = get_exam(db, exam_id, current_user)
    if is_admin(current_user):
        return ExamAdminOut.model_validate(exam)
    return ExamOut.model_validate(exam)


@router.post(
    "/exams/{exam_id}/submit",
    response_model=SubmissionResult,
    status_code=status.HTTP_201_CREATED,
    summary="Submit answers",
    description="Retakes replace the previous answers and increment attempt_count.",
)
async def submit(
    exam_id: UUID,
    request_data: ExamSubmitRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SubmissionResult:
    exam = get_exam(db, exam_id, current_user)
    submission = submit_exam(
        db, exam, current_user, request_data.answers, request_data.time_taken_seconds
    )
    return SubmissionResult.model_validate(submission)


@router.get(
    "/exams/submissions/{submission_id}",
    response_model=SubmissionResult,
    summary="Get a submission result",
)
async def read_submission(
    submission_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SubmissionResult:
    submission = get_submission(db, submission_id, current_user)
    return SubmissionResult.model_validate(submission)


@router.post(
    "/admin/exams/answers/{answer_id}/grade",
    response_model=SubmissionResult,
    summary="Grade an answer",
    tags=["Admin - Exams"],
)
async def grade(
    answer_id: UUID,
    request_data: GradeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_exam_admin),
) -> SubmissionResult:
    submission = grade_answer(db, answer_id, request_data.points)
    return SubmissionResult.model_validate(submission)


@router.get(
    "/admin/exams",
    response_model=list[ExamListItem],
    summary="List exams",
    tags=["Admin - Exams"],
)
async def list_exams(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_exam_admin),
) -> list[ExamListItem]:
    return list_exams_for_admin(db)


@router.get(
    "/admin/exams/{exam_id}/submissions",
    response_model=ExamResults,
    summary="List an exam's submissions",
    description="Best score first. Includes answer ids for manual grading.",
    tags=["Admin - Exams"],
)
async def exam_results(
    exam_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_results_viewer),
) -> ExamResults:
    exam, submissions = get_exam_results(db, exam_id)
    return ExamResults(
        exam_id=exam.id,
        title=exam.title,
        max_score=sum(question.points for question in exam.questions),
        submissions=[SubmissionSummary.model_validate(submission) for submission in submissions],
    )


@router.delete(
    "/admin/exams/{exam_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an exam",
    description="Deletes the exam with its questions and all submissions.",
    tags=["Admin - Exams"],
)
async def remove_exam(
    exam_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_exam_owner),
) -> None:
    delete_exam(db, exam_id)


@router.patch(
    "/admin/exams/submissions/{submission_id}/attempts",
    response_model=SubmissionResult,
    summary="Set a submission's attempt count",
    tags=["Admin - Exams"],
)
async def set_attempts(
    submission_id: UUID,
    request_data: AttemptCountUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_exam_owner),
) -> SubmissionResult:
    submission = update_attempt_count(db, submission_id, request_data.attempt_count)
    return SubmissionResult.model_validate(submission)
