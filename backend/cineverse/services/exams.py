"""Exam authoring, submission and grading."""

import math
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cineverse.common.timeutils import utcnow
from cineverse.core.app_exceptions import Conflict, NotFound, ValidationFailed
from cineverse.core.logging import get_logger
from cineverse.core.permissions import ADMIN_ROLES, parse_role
from cineverse.models.exam import (
    Exam,
    ExamAnswer,
    ExamOption,
    ExamQuestion,
    ExamSubmission,
    QuestionType,
    SubmissionStatus,
)
from cineverse.models.user import User
from cineverse.schemas.exam import AnswerSubmit, ExamCreate, ExamListItem

logger = get_logger(__name__)

CHOICE_TYPES = (QuestionType.SINGLE_CHOICE, QuestionType.MULTIPLE_CHOICE)


def is_admin(user: User | None) -> bool:
    return user is not None and parse_role(user.role) in ADMIN_ROLES


def create_exam(db: Session, author: User, payload: ExamCreate) -> Exam:
    """Create an exam with its questions and options.

    Choice questions need at least one correct option; short-answer questions
    take no options.
    """
    for index, question in enumerate(payload.questions):
        if question.type in CHOICE_TYPES:
            if not any(option.is_correct for option in question.options):
                raise ValidationFailed(
                    "Choice questions need at least one correct option",
                    details={"question_index": index},
                )
        elif question.options:
            raise ValidationFailed(
                "Short answer questions take no options",
                details={"question_index": index},
            )

    exam = Exam(
        title=payload.title.strip(),
        description=payload.description,
        post_id=payload.post_id,
        author_id=author.id,
        is_published=payload.is_published,
        duration_minutes=payload.duration_minutes,
    )
    for position, question in enumerate(payload.questions):
        exam.questions.append(
            ExamQuestion(
                text=question.text,
                type=question.type.value,
                points=question.points,
                position=position,
                options=[
                    ExamOption(text=option.text, is_correct=option.is_correct)
                    for option in question.options
                ],
            )
        )

    db.add(exam)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(exam)

    logger.info(
        "Exam created",
        extra={"exam_id": str(exam.id), "author_id": str(author.id), "questions": len(exam.questions)},
    )
    return exam


def get_exam(db: Session, exam_id: UUID, user: User | None) -> Exam:
    """Load an exam. Unpublished exams exist only for admins."""
    exam = db.get(Exam, exam_id)
    if exam is None or (not exam.is_published and not is_admin(user)):
        raise NotFound("Exam")
    return exam


def _score_choice(question: ExamQuestion, selected: set[UUID]) -> tuple[bool, float]:
    """Return (fully correct, points) for a choice question.

    Multiple choice earns ``points / |correct|`` per correct selection, rounded
    half up, and nothing at all if any wrong option is picked.
    """
    correct = {option.id for option in question.options if option.is_correct}
    if not selected or not correct:
        return False, 0.0
    if question.type == QuestionType.SINGLE_CHOICE.value:
        if len(selected) == 1 and selected <= correct:
            return True, float(question.points)
        return False, 0.0
    if not selected <= correct:
        return False, 0.0
    raw = len(selected) * question.points / len(correct)
    return selected == correct, float(math.floor(raw + 0.5))


def _recompute(submission: ExamSubmission) -> None:
    awarded = [answer.points_awarded for answer in submission.answers]
    submission.score = sum(points for points in awarded if points is not None)
    submission.status = (
        SubmissionStatus.SUBMITTED.value
        if any(points is None for points in awarded)
        else SubmissionStatus.GRADED.value
    )


def _build_answers(exam: Exam, answers: list[AnswerSubmit]) -> list[ExamAnswer]:
    questions = {question.id: question for question in exam.questions}
    by_question: dict[UUID, AnswerSubmit] = {}
    for answer in answers:
        if answer.question_id not in questions:
            raise ValidationFailed(
                "Answer refers to a question outside this exam",
                details={"question_id": str(answer.question_id)},
            )
        if answer.question_id in by_question:
            raise ValidationFailed(
                "Question answered more than once",
                details={"question_id": str(answer.question_id)},
            )
        by_question[answer.question_id] = answer

    built = []
    for question in exam.questions:
        answer = by_question.get(question.id)
        selected = set(answer.selected_option_ids) if answer else set()
        text = (answer.text_answer or "").strip() if answer else ""

        if question.type == QuestionType.SHORT_ANSWER.value:
            if text:
                is_correct, points = None, None
            else:
                is_correct, points = False, 0.0
        else:
            option_ids = {option.id for option in question.options}
            if not selected <= option_ids:
                raise ValidationFailed(
                    "Selected option does not belong to the question",
                    details={"question_id": str(question.id)},
                )
            is_correct, points = _score_choice(question, selected)

        built.append(
            ExamAnswer(
                question_id=question.id,
                selected_option_ids=sorted(str(option_id) for option_id in selected),
                text_answer=text or None,
                is_correct=is_correct,
                points_awarded=points,
            )
        )
    return built


def submit_exam(
    db: Session,
    exam: Exam,
    user: User,
    answers: list[AnswerSubmit],
    time_taken_seconds: int | None = None,
) -> ExamSubmission:
    """Record and auto-grade a user's attempt at an exam.

    Each user keeps one submission per exam. A retake replaces its answers,
    resets the score and bumps ``attempt_count``. Choice questions are graded
    immediately; answered short-answer questions stay pending until an admin
    grades them, unanswered ones score zero.
    """
    new_answers = _build_answers(exam, answers)

    submission = (
        db.query(ExamSubmission)
        .filter(ExamSubmission.exam_id == exam.id, ExamSubmission.user_id == user.id)
        .first()
    )
    if submission is None:
        submission = ExamSubmission(exam_id=exam.id, user_id=user.id, attempt_count=1)
        db.add(submission)
    else:
        submission.attempt_count = ExamSubmission.attempt_count + 1
        submission.answers.clear()

    submission.answers.extend(new_answers)
    submission.max_score = sum(question.points for question in exam.questions)
    submission.time_taken_seconds = time_taken_seconds
    submission.submitted_at = utcnow()
    _recompute(submission)
    try:
        db.commit()
    except IntegrityError as e:
        # Another first attempt by the same user landed in between
        db.rollback()
        raise Conflict("Submission already in progress, please retry") from e
    except Exception:
        db.rollback()
        raise
    db.refresh(submission)

    logger.info(
        "Exam submitted",
        extra={
            "exam_id": str(exam.id),
            "submission_id": str(submission.id),
            "user_id": str(user.id),
            "attempt": submission.attempt_count,
            "status": submission.status,
        },
    )
    return submission


def get_submission(db: Session, submission_id: UUID, user: User) -> ExamSubmission:
    """Load a submission for its owner or an admin; anyone else gets 404."""
    submission = db.get(ExamSubmission, submission_id)
    if submission is None or (submission.user_id != user.id and not is_admin(user)):
        raise NotFound("Submission")
    return submission


def grade_answer(db: Session, answer_id: UUID, points: float) -> ExamSubmission:
    """Award points to one answer and recompute the submission's score and status."""
    answer = db.get(ExamAnswer, answer_id)
    if answer is None:
        raise NotFound("Answer")

    max_points = answer.question.points
    if points < 0 or points > max_points:
        raise ValidationFailed(
            f"Points must be between 0 and {max_points}",
            details={"points": points, "max_points": max_points},
        )

    answer.points_awarded = points
    answer.is_correct = points > 0
    submission = answer.submission
    _recompute(submission)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(submission)

    logger.info(
        "Answer graded",
        extra={"answer_id": str(answer.id), "submission_id": str(submission.id), "points": points},
    )
    return submission


def list_exams_for_admin(db: Session) -> list[ExamListItem]:
    """All exams, newest first, with question and submission counts."""
    question_counts = (
        db.query(ExamQuestion.exam_id, func.count(ExamQuestion.id).label("total"))
        .group_by(ExamQuestion.exam_id)
        .subquery()
    )
    submission_counts = (
        db.query(ExamSubmission.exam_id, func.count(ExamSubmission.id).label("total"))
        .group_by(ExamSubmission.exam_id)
        .subquery()
    )
    rows = (
        db.query(
            Exam,
            func.coalesce(question_counts.c.total, 0),
            func.coalesce(submission_counts.c.total, 0),
        )
        .outerjoin(question_counts, question_counts.c.exam_id == Exam.id)
        .outerjoin(submission_counts, submission_counts.c.exam_id == Exam.id)
        .order_by(Exam.created_at.desc())
        .all()
    )
    return [
        ExamListItem(
            id=exam.id,
            title=exam.title,
            is_published=exam.is_published,
            post_id=exam.post_id,
            created_at=exam.created_at,
            question_count=question_count,
            submission_count=submission_count,
        )
        for exam, question_count, submission_count in rows
    ]


def get_exam_results(db: Session, exam_id: UUID) -> tuple[Exam, list[ExamSubmission]]:
    """An exam and its submissions, best score first."""
    exam = db.get(Exam, exam_id)
    if exam is None:
        raise NotFound("Exam")
    submissions = (
        db.query(ExamSubmission)
        .filter(ExamSubmission.exam_id == exam.id)
        .order_by(ExamSubmission.score.desc(), ExamSubmission.submitted_at.asc())
        .all()
    )
    return exam, submissions


def delete_exam(db: Session, exam_id: UUID) -> None:
    """Delete an exam together with its questions, options and submissions."""
    exam = db.get(Exam, exam_id)
    if exam is None:
        raise NotFound("Exam")

    db.delete(exam)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Exam deleted", extra={"exam_id": str(exam_id)})


def update_attempt_count(db: Session, submission_id: UUID, attempt_count: int) -> ExamSubmission:
    """Overwrite a submission's attempt counter, e.g. to reset a user's retakes."""
    submission = db.get(ExamSubmission, submission_id)
    if submission is None:
        raise NotFound("Submission")

    submission.attempt_count = attempt_count
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(submission)
    return submission
