"""SQLAlchemy models for course quizzes and recorded attempts."""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from filmacademy.core.database import Base
from filmacademy.core.db_defaults import utcnow
from filmacademy.models.types import jsonb_type


class CourseQuiz(Base):
    """Quiz attached to a course."""

    __tablename__ = "course_quizzes"

    id = Column(Integer, primary_key=True)
    course_id = Column(
        Integer,
        ForeignKey("academy_courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    passing_score = Column(Integer, nullable=True)
    time_limit_minutes = Column(Integer, nullable=True)
    max_attempts = Column(Integer, nullable=True)
    is_required_for_certification = Column(Boolean, nullable=False, default=False)
    order_index = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    course = relationship("Course", back_populates="quizzes")
    questions = relationship(
        "QuizQuestion",
        back_populates="quiz",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="QuizQuestion.order_index",
    )
    attempts = relationship(
        "QuizAttempt",
        back_populates="quiz",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class QuizQuestion(Base):
    """Single multiple-choice (or true/false) question."""

    __tablename__ = "quiz_questions"

    id = Column(Integer, primary_key=True)
    quiz_id = Column(
        Integer,
        ForeignKey("course_quizzes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_text = Column(Text, nullable=False)
    question_type = Column(String, nullable=False, default="multiple_choice")
    options = Column(jsonb_type(), nullable=False, default=list)
    correct_answer = Column(String, nullable=False)
    explanation = Column(Text, nullable=True)
    points = Column(Integer, nullable=False, default=1)
    order_index = Column(Integer, nullable=False, default=0)

    quiz = relationship("CourseQuiz", back_populates="questions")


class QuizAttempt(Base):
    """Append-only record of a submitted quiz."""

    __tablename__ = "user_quiz_attempts"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "quiz_id", "attempt_number", name="uq_quiz_attempt_number"
        ),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quiz_id = Column(
        Integer,
        ForeignKey("course_quizzes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    score = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False)
    answers = Column(jsonb_type(), nullable=False, default=dict)
    passed = Column(Boolean, nullable=False, default=False)
    time_taken_seconds = Column(Integer, nullable=True)
    attempt_number = Column(Integer, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    quiz = relationship("CourseQuiz", back_populates="attempts")
    user = relationship("User")


__all__ = ["CourseQuiz", "QuizQuestion", "QuizAttempt"]
