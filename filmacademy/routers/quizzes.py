"""Learner-facing quiz endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from filmacademy import oauth2
from filmacademy.core.database import get_db
from filmacademy.modules.quizzes.schemas import (
    AttemptOut,
    AttemptResult,
    AttemptSubmit,
    QuestionPublic,
    QuizOut,
)
from filmacademy.modules.quizzes.service import QuizService
from filmacademy.modules.users.models import User

router = APIRouter(tags=["Quizzes"])


def get_quiz_service(db: Session = Depends(get_db)) -> QuizService:
    """Provide a QuizService instance via FastAPI dependency injection."""
    return QuizService(db)


@router.get("/courses/{course_id}/quizzes", response_model=List[QuizOut])
def list_course_quizzes(
    course_id: int, service: QuizService = Depends(get_quiz_service)
):
    return service.list_quizzes(course_id)


@router.get("/quizzes/{quiz_id}/questions", response_model=List[QuestionPublic])
def list_quiz_questions(
    quiz_id: int,
    service: QuizService = Depends(get_quiz_service),
    current_user: User = Depends(oauth2.get_current_user),
):
    """Questions in order, without the answer key."""
    return service.list_questions(quiz_id)


@router.post(
    "/quizzes/{quiz_id}/attempts",
    status_code=status.HTTP_201_CREATED,
    response_model=AttemptResult,
)
def submit_attempt(
    quiz_id: int,
    payload: AttemptSubmit,
    service: QuizService = Depends(get_quiz_service),
    current_user: User = Depends(oauth2.get_current_user),
):
    """Grade and record an attempt; the response carries per-question feedback."""
    graded = service.submit_attempt(
        current_user, quiz_id, payload.answers, payload.started_at
    )
    return AttemptResult(
        **AttemptOut.model_validate(graded.attempt).model_dump(),
        correct_count=graded.correct_count,
        passing_score=graded.passing_score,
        feedback=graded.feedback,
    )


@router.get("/quizzes/{quiz_id}/attempts", response_model=List[AttemptOut])
def list_my_attempts(
    quiz_id: int,
    service: QuizService = Depends(get_quiz_service),
    current_user: User = Depends(oauth2.get_current_user),
):
    return service.list_attempts(current_user, quiz_id)
