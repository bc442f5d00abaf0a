"""Admin authoring and moderation for the academy."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from filmacademy import oauth2
from filmacademy.core.database import get_db
from filmacademy.modules.discussions.schemas import DiscussionModeration, DiscussionOut
from filmacademy.modules.discussions.service import DiscussionService
from filmacademy.modules.learning.schemas import CourseCreate, CourseOut, CourseUpdate
from filmacademy.modules.learning.service import CourseService
from filmacademy.modules.quizzes.schemas import (
    QuestionCreate,
    QuestionOut,
    QuizAnalytics,
    QuizCreate,
    QuizOut,
)
from filmacademy.modules.quizzes.service import QuizService

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(oauth2.get_current_admin)],
)


# ==================== Courses ====================


@router.post("/courses", status_code=status.HTTP_201_CREATED, response_model=CourseOut)
def create_course(payload: CourseCreate, db: Session = Depends(get_db)):
    return CourseService(db).create_course(payload)


@router.patch("/courses/{course_id}", response_model=CourseOut)
def update_course(course_id: int, payload: CourseUpdate, db: Session = Depends(get_db)):
    """Partial update, including featured toggle and ordering."""
    return CourseService(db).update_course(course_id, payload)


@router.delete("/courses/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(course_id: int, db: Session = Depends(get_db)):
    CourseService(db).delete_course(course_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ==================== Quizzes ====================


@router.post(
    "/courses/{course_id}/quizzes",
    status_code=status.HTTP_201_CREATED,
    response_model=QuizOut,
)
def create_quiz(course_id: int, payload: QuizCreate, db: Session = Depends(get_db)):
    return QuizService(db).create_quiz(course_id, payload)


@router.post(
    "/quizzes/{quiz_id}/questions",
    status_code=status.HTTP_201_CREATED,
    response_model=QuestionOut,
)
def add_question(quiz_id: int, payload: QuestionCreate, db: Session = Depends(get_db)):
    return QuizService(db).add_question(quiz_id, payload)


@router.get("/quizzes/{quiz_id}/analytics", response_model=QuizAnalytics)
def quiz_analytics(quiz_id: int, db: Session = Depends(get_db)):
    return QuizService(db).analytics(quiz_id)


# ==================== Discussions ====================


@router.patch("/discussions/{discussion_id}", response_model=DiscussionOut)
def moderate_discussion(
    discussion_id: int,
    payload: DiscussionModeration,
    db: Session = Depends(get_db),
):
    """Pin or lock a discussion."""
    return DiscussionService(db).moderate(discussion_id, payload)
