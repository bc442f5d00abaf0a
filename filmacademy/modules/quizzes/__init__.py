"""Quiz domain package exports."""

from .models import CourseQuiz, QuizAttempt, QuizQuestion

__all__ = ["CourseQuiz", "QuizAttempt", "QuizQuestion"]
