"""Course discussion forum."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from filmacademy import oauth2
from filmacademy.core.database import get_db
from filmacademy.modules.discussions.schemas import (
    DiscussionCreate,
    DiscussionOut,
    ReplyCreate,
    ReplyOut,
)
from filmacademy.modules.discussions.service import DiscussionService
from filmacademy.modules.users.models import User

router = APIRouter(tags=["Discussions"])


def get_discussion_service(db: Session = Depends(get_db)) -> DiscussionService:
    """Provide a DiscussionService instance via FastAPI dependency injection."""
    return DiscussionService(db)


@router.get("/courses/{course_id}/discussions", response_model=List[DiscussionOut])
def list_discussions(
    course_id: int, service: DiscussionService = Depends(get_discussion_service)
):
    """Pinned threads first, then newest first."""
    return service.list_discussions(course_id)


@router.post(
    "/courses/{course_id}/discussions",
    status_code=status.HTTP_201_CREATED,
    response_model=DiscussionOut,
)
def create_discussion(
    course_id: int,
    payload: DiscussionCreate,
    service: DiscussionService = Depends(get_discussion_service),
    current_user: User = Depends(oauth2.get_current_user),
):
    return service.create_discussion(
        current_user, course_id, payload.title, payload.content
    )


@router.get("/discussions/{discussion_id}", response_model=DiscussionOut)
def get_discussion(
    discussion_id: int, service: DiscussionService = Depends(get_discussion_service)
):
    return service.get_discussion(discussion_id)


@router.get("/discussions/{discussion_id}/replies", response_model=List[ReplyOut])
def list_replies(
    discussion_id: int, service: DiscussionService = Depends(get_discussion_service)
):
    return service.list_replies(discussion_id)


@router.post(
    "/discussions/{discussion_id}/replies",
    status_code=status.HTTP_201_CREATED,
    response_model=ReplyOut,
)
def create_reply(
    discussion_id: int,
    payload: ReplyCreate,
    service: DiscussionService = Depends(get_discussion_service),
    current_user: User = Depends(oauth2.get_current_user),
):
    return service.create_reply(current_user, discussion_id, payload.content)


@router.post("/replies/{reply_id}/solution", response_model=ReplyOut)
def mark_solution(
    reply_id: int,
    service: DiscussionService = Depends(get_discussion_service),
    current_user: User = Depends(oauth2.get_current_user),
):
    """Only the discussion author (or an admin) may mark the accepted answer."""
    return service.mark_as_solution(current_user, reply_id)
