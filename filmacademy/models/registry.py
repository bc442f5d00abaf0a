"""Aggregated model registry so metadata (Alembic, tests) sees every table."""

from filmacademy.modules.discussions.models import CourseDiscussion, DiscussionReply
from filmacademy.modules.learning.models import (
    Course,
    CourseProgress,
    Certification,
    ProgressStatus,
)
from filmacademy.modules.quizzes.models import CourseQuiz, QuizAttempt, QuizQuestion
from filmacademy.modules.users.models import User, UserRole

__all__ = [
    "User",
    "UserRole",
    "Course",
    "CourseProgress",
    "ProgressStatus",
    "Certification",
    "CourseQuiz",
    "QuizQuestion",
    "QuizAttempt",
    "CourseDiscussion",
    "DiscussionReply",
]
