"""Exam, question, option, submission and answer models."""

import uuid
from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from cineverse.common.timeutils import utcnow
from cineverse.db.base import Base


class QuestionType(str, Enum):
    SINGLE_CHOICE = "SINGLE_CHOICE"
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    SHORT_ANSWER = "SHORT_ANSWER"


class SubmissionStatus(str, Enum):
    SUBMITTED = "SUBMITTED"  # Short answers still waiting for a grader
    GRADED = "GRADED"


class Exam(Base):
    __tablename__ = "exams"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    post_id = Column(Uuid, ForeignKey("posts.id", ondelete="SET NULL"), nullable=True)
    author_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    is_published = Column(Boolean, nullable=False, default=False)
    duration_minutes = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    questions = relationship(
        "ExamQuestion",
        back_populates="exam",
        cascade="all, delete-orphan",
        order_by="ExamQuestion.position",
    )
    submissions = relationship(
        "ExamSubmission", back_populates="exam", cascade="all, delete-orphan"
    )


class ExamQuestion(Base):
    __tablename__ = "exam_questions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    exam_id = Column(Uuid, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    type = Column(String(32), nullable=False, default=QuestionType.SINGLE_CHOICE.value)
    points = Column(Float, nullable=False, default=1.0)
    position = Column(Integer, nullable=False, default=0)

    exam = relationship("Exam", back_populates="questions")
    options = relationship(
        "ExamOption", back_populates="question", cascade="all, delete-orphan"
    )


class ExamOption(Base):
    __tablename__ = "exam_options"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    question_id = Column(
        Uuid, ForeignKey("exam_questions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    text = Column(String(1000), nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)

    question = relationship("ExamQuestion", back_populates="options")


class ExamSubmission(Base):
    __tablename__ = "exam_submissions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    exam_id = Column(Uuid, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    score = Column(Float, nullable=False, default=0.0)
    max_score = Column(Float, nullable=False, default=0.0)
    status = Column(String(16), nullable=False, default=SubmissionStatus.SUBMITTED.value)
    attempt_count = Column(Integer, nullable=False, default=1)
    time_taken_seconds = Column(Integer, nullable=True)
    submitted_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    exam = relationship("Exam", back_populates="submissions")
    user = relationship("User")
    answers = relationship(
        "ExamAnswer", back_populates="submission", cascade="all, delete-orphan"
    )

    __table_args__ = (UniqueConstraint("exam_id", "user_id", name="uq_exam_submission_user"),)


class ExamAnswer(Base):
    __tablename__ = "exam_answers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    submission_id = Column(
        Uuid, ForeignKey("exam_submissions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_id = Column(
        Uuid, ForeignKey("exam_questions.id", ondelete="CASCADE"), nullable=False
    )
    selected_option_ids = Column(JSON, nullable=False, default=list)  # list[str]
    text_answer = Column(Text, nullable=True)
    is_correct = Column(Boolean, nullable=True)  # None until graded
    points_awarded = Column(Float, nullable=True)

    submission = relationship("ExamSubmission", back_populates="answers")
    question = relationship("ExamQuestion")
