"""Quiz scoring, attempt recording and analytics."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from filmacademy.core.config import settings
from filmacademy.core.db_defaults import utcnow
from filmacademy.core.exceptions import (
    MaxAttemptsExceededException,
    ResourceConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from filmacademy.modules.learning.service import CourseService
from filmacademy.modules.users.models import User

from .models import CourseQuiz, QuizAttempt, QuizQuestion
from .schemas import (
    QuestionCreate,
    QuestionFeedback,
    QuestionStats,
    QuizAnalytics,
    QuizCreate,
)

logger = logging.getLogger(__name__)


def compute_score(correct: int, total: int) -> int:
    """Percentage of correct answers rounded half up (12.5 -> 13)."""
    if total <= 0:
        raise ValueError("total must be positive")
    return (200 * correct + total) // (2 * total)


def elapsed_seconds(started_at: Optional[datetime], now: datetime) -> Optional[int]:
    """Seconds between a client-reported start and server time, never negative."""
    if started_at is None:
        return None
    if started_at.tzinfo is None:
        started_at = started_at.replace(tzinfo=timezone.utc)
    return max(0, round((now - started_at).total_seconds()))


def _percent(part: int, whole: int) -> float:
    return round(100 * part / whole, 1) if whole else 0.0


@dataclass
class GradedAttempt:
    attempt: QuizAttempt
    correct_count: int
    passing_score: int
    feedback: List[QuestionFeedback]


class QuizService:
    """Learner-facing quiz reads, attempt submission and admin authoring."""

    def __init__(self, db: Session):
        self.db = db

    def get_quiz(self, quiz_id: int) -> CourseQuiz:
        quiz = self.db.query(CourseQuiz).filter(CourseQuiz.id == quiz_id).first()
        if not quiz:
            raise ResourceNotFoundException("Quiz", quiz_id)
        return quiz

    def list_quizzes(self, course_id: int) -> List[CourseQuiz]:
        CourseService(self.db).get_course(course_id)
        return (
            self.db.query(CourseQuiz)
            .filter(CourseQuiz.course_id == course_id)
            .order_by(CourseQuiz.order_index.asc(), CourseQuiz.id.asc())
            .all()
        )

    def list_questions(self, quiz_id: int) -> List[QuizQuestion]:
        self.get_quiz(quiz_id)
        return (
            self.db.query(QuizQuestion)
            .filter(QuizQuestion.quiz_id == quiz_id)
            .order_by(QuizQuestion.order_index.asc(), QuizQuestion.id.asc())
            .all()
        )

    def list_attempts(self, user: User, quiz_id: int) -> List[QuizAttempt]:
        self.get_quiz(quiz_id)
        return (
            self.db.query(QuizAttempt)
            .filter(QuizAttempt.user_id == user.id, QuizAttempt.quiz_id == quiz_id)
            .order_by(QuizAttempt.attempt_number.desc())
            .all()
        )

    def submit_attempt(
        self,
        user: User,
        quiz_id: int,
        answers: Mapping[int, str],
        started_at: Optional[datetime] = None,
    ) -> GradedAttempt:
        """Grade answers against the stored key and record the next numbered attempt."""
        quiz = self.get_quiz(quiz_id)
        questions = self.list_questions(quiz.id)
        if not questions:
            raise ValidationException("Quiz has no questions", field="quiz_id")

        previous = (
            self.db.query(
                func.count(QuizAttempt.id), func.max(QuizAttempt.attempt_number)
            )
            .filter(QuizAttempt.user_id == user.id, QuizAttempt.quiz_id == quiz.id)
            .one()
        )
        attempts_so_far, last_number = previous[0] or 0, previous[1] or 0
        if quiz.max_attempts and attempts_so_far >= quiz.max_attempts:
            raise MaxAttemptsExceededException(quiz.max_attempts)

        stored_answers: Dict[str, str] = {}
        feedback: List[QuestionFeedback] = []
        correct = 0
        for question in questions:
            selected = answers.get(question.id)
            is_correct = (
                selected is not None
                and selected.strip() == question.correct_answer.strip()
            )
            if selected is not None:
                stored_answers[str(question.id)] = selected
            correct += int(is_correct)
            feedback.append(
                QuestionFeedback(
                    question_id=question.id,
                    selected_answer=selected,
                    correct_answer=question.correct_answer,
                    is_correct=is_correct,
                    explanation=question.explanation,
                )
            )

        passing_score = (
            quiz.passing_score
            if quiz.passing_score is not None
            else settings.DEFAULT_PASSING_SCORE
        )
        score = compute_score(correct, len(questions))
        now = utcnow()
        attempt = QuizAttempt(
            user_id=user.id,
            quiz_id=quiz.id,
            score=score,
            total_questions=len(questions),
            answers=stored_answers,
            passed=score >= passing_score,
            time_taken_seconds=elapsed_seconds(started_at, now),
            attempt_number=last_number + 1,
            completed_at=now,
        )
        self.db.add(attempt)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ResourceConflictException(
                "Another attempt was recorded at the same time; please resubmit",
                details={"quiz_id": quiz.id},
            )
        self.db.refresh(attempt)

        logger.info(
            "Quiz attempt recorded",
            extra={
                "user_id": user.id,
                "quiz_id": quiz.id,
                "attempt_number": attempt.attempt_number,
                "score": score,
            },
        )
        return GradedAttempt(
            attempt=attempt,
            correct_count=correct,
            passing_score=passing_score,
            feedback=feedback,
        )

    # ==================== Admin ====================

    def create_quiz(self, course_id: int, payload: QuizCreate) -> CourseQuiz:
        course = CourseService(self.db).get_course(course_id)
        quiz = CourseQuiz(course_id=course.id, **payload.model_dump())
        self.db.add(quiz)
        self.db.commit()
        self.db.refresh(quiz)
        return quiz

    def add_question(self, quiz_id: int, payload: QuestionCreate) -> QuizQuestion:
        quiz = self.get_quiz(quiz_id)
        data = payload.model_dump()
        data["question_type"] = payload.question_type.value
        question = QuizQuestion(quiz_id=quiz.id, **data)
        self.db.add(question)
        self.db.commit()
        self.db.refresh(question)
        return question

    def analytics(self, quiz_id: int) -> QuizAnalytics:
        questions = self.list_questions(quiz_id)
        attempts = (
            self.db.query(QuizAttempt).filter(QuizAttempt.quiz_id == quiz_id).all()
        )

        total = len(attempts)
        passed = sum(1 for attempt in attempts if attempt.passed)
        timed = [
            attempt.time_taken_seconds
            for attempt in attempts
            if attempt.time_taken_seconds is not None
        ]
        first_attempts = [a for a in attempts if a.attempt_number == 1]

        question_stats = []
        for question in questions:
            key = str(question.id)
            answered = [a.answers[key] for a in attempts if key in (a.answers or {})]
            right = sum(
                1
                for answer in answered
                if answer.strip() == question.correct_answer.strip()
            )
            question_stats.append(
                QuestionStats(
                    question_id=question.id,
                    question_text=question.question_text,
                    times_answered=len(answered),
                    times_correct=right,
                    success_rate=_percent(right, len(answered)),
                )
            )

        return QuizAnalytics(
            quiz_id=quiz_id,
            total_attempts=total,
            passed_attempts=passed,
            pass_rate=_percent(passed, total),
            average_score=(
                round(sum(a.score for a in attempts) / total, 1) if total else 0.0
            ),
            average_time_seconds=round(sum(timed) / len(timed), 1) if timed else None,
            unique_users=len({a.user_id for a in attempts}),
            first_attempt_pass_rate=_percent(
                sum(1 for a in first_attempts if a.passed), len(first_attempts)
            ),
            questions=question_stats,
        )


__all__ = ["QuizService", "GradedAttempt", "compute_score", "elapsed_seconds"]
