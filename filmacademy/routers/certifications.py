"""Certificates owned by the signed-in user."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from filmacademy import oauth2
from filmacademy.core.database import get_db
from filmacademy.modules.learning.schemas import (
    CertificationIssueRequest,
    CertificationOut,
    CertificationStats,
)
from filmacademy.modules.learning.service import CertificationService
from filmacademy.modules.users.models import User

router = APIRouter(tags=["Certifications"])


def get_certification_service(db: Session = Depends(get_db)) -> CertificationService:
    """Provide a CertificationService instance via FastAPI dependency injection."""
    return CertificationService(db)


@router.post("/certifications/issue", response_model=CertificationOut)
def issue_certification(
    payload: CertificationIssueRequest,
    service: CertificationService = Depends(get_certification_service),
    current_user: User = Depends(oauth2.get_current_user),
):
    """Issue (or return the already issued) certificate for a completed course."""
    return service.issue_for_completed_course(current_user, payload.course_id)


@router.get("/certifications/me", response_model=List[CertificationOut])
def list_my_certifications(
    service: CertificationService = Depends(get_certification_service),
    current_user: User = Depends(oauth2.get_current_user),
):
    return service.list_for_user(current_user)


@router.get("/certifications/me/stats", response_model=CertificationStats)
def my_certification_stats(
    service: CertificationService = Depends(get_certification_service),
    current_user: User = Depends(oauth2.get_current_user),
):
    return service.stats_for_user(current_user)


@router.get("/certifications/{certification_id}", response_model=CertificationOut)
def get_certification(
    certification_id: int,
    service: CertificationService = Depends(get_certification_service),
    current_user: User = Depends(oauth2.get_current_user),
):
    return service.get_for_owner(current_user, certification_id)


@router.get("/courses/{course_id}/certification", response_model=CertificationOut)
def get_course_certification(
    course_id: int,
    service: CertificationService = Depends(get_certification_service),
    current_user: User = Depends(oauth2.get_current_user),
):
    return service.get_for_course(current_user, course_id)
