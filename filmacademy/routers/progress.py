"""Enrollment and progress endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from filmacademy import oauth2
from filmacademy.core.database import get_db
from filmacademy.modules.learning.schemas import (
    CertificationOut,
    ProgressOut,
    ProgressUpdate,
    ProgressUpdateOut,
)
from filmacademy.modules.learning.service import ProgressService
from filmacademy.modules.users.models import User

router = APIRouter(tags=["Progress"])


def get_progress_service(db: Session = Depends(get_db)) -> ProgressService:
    """Provide a ProgressService instance via FastAPI dependency injection."""
    return ProgressService(db)


@router.post(
    "/courses/{course_id}/enroll",
    status_code=status.HTTP_201_CREATED,
    response_model=ProgressOut,
)
def enroll(
    course_id: int,
    service: ProgressService = Depends(get_progress_service),
    current_user: User = Depends(oauth2.get_current_user),
):
    """Enroll the current user; a second enrollment answers 409."""
    return service.enroll(current_user, course_id)


@router.put("/courses/{course_id}/progress", response_model=ProgressUpdateOut)
def update_progress(
    course_id: int,
    payload: ProgressUpdate,
    service: ProgressService = Depends(get_progress_service),
    current_user: User = Depends(oauth2.get_current_user),
):
    """Record watch progress; crossing the completion threshold issues the certificate."""
    progress, certification = service.update_progress(
        current_user, course_id, payload.progress_percentage
    )
    return ProgressUpdateOut.model_validate(progress).model_copy(
        update={
            "certification": (
                CertificationOut.model_validate(certification)
                if certification
                else None
            )
        }
    )


@router.get("/courses/{course_id}/progress", response_model=ProgressOut)
def get_course_progress(
    course_id: int,
    service: ProgressService = Depends(get_progress_service),
    current_user: User = Depends(oauth2.get_current_user),
):
    return service.get_for_course(current_user, course_id)


@router.get("/progress/me", response_model=List[ProgressOut])
def list_my_progress(
    service: ProgressService = Depends(get_progress_service),
    current_user: User = Depends(oauth2.get_current_user),
):
    return service.list_for_user(current_user)
