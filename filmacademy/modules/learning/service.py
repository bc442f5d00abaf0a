"""Application services for the course catalog, progress tracking and certification."""

from __future__ import annotations

import logging
import secrets
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from filmacademy.core.config import settings
from filmacademy.core.db_defaults import utcnow
from filmacademy.core.exceptions import (
    AppException,
    CourseNotCompletedException,
    OwnershipRequiredException,
    ResourceAlreadyExistsException,
    ResourceConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from filmacademy.modules.users.models import User
from filmacademy.modules.utils.text import display_name

from .models import Certification, Course, CourseProgress, ProgressStatus
from .schemas import (
    CertificateVerification,
    CertificationStats,
    CourseCreate,
    CourseFilters,
    CourseUpdate,
)

logger = logging.getLogger(__name__)

SKILLS_BY_CATEGORY = {
    "Pre-Production": ["Script Analysis", "Budgeting", "Scheduling", "Planning"],
    "Production": ["Directing", "Cinematography", "On-Set Management"],
    "Post-Production": ["Editing", "Sound Design", "Color Grading"],
    "Distribution": ["Festival Strategy", "Marketing", "Distribution"],
    "Funding": ["Pitching", "Grant Writing", "Investor Relations"],
}
DEFAULT_SKILLS = ["Filmmaking"]

CERTIFICATE_NUMBER_RETRIES = 5


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def skills_for_category(category: Optional[str]) -> List[str]:
    """Skills a certificate grants for a course category."""
    return list(SKILLS_BY_CATEGORY.get(category or "", DEFAULT_SKILLS))


def generate_certificate_number(year: int, prefix: Optional[str] = None) -> str:
    """Build `<prefix>-<year>-<6 digits>` using a CSPRNG."""
    prefix = prefix or settings.CERTIFICATE_PREFIX
    return f"{prefix}-{year:04d}-{secrets.randbelow(900000) + 100000}"


class CourseService:
    """Catalog reads and admin authoring for courses."""

    def __init__(self, db: Session):
        self.db = db

    def list_courses(self, filters: Optional[CourseFilters] = None) -> List[Course]:
        query = self.db.query(Course)
        if filters:
            if filters.category:
                query = query.filter(Course.category == filters.category)
            if filters.level:
                query = query.filter(Course.level == filters.level)
            if filters.related_tool:
                query = query.filter(Course.related_tool == filters.related_tool)
            if filters.search and filters.search.strip():
                pattern = _like_pattern(filters.search.strip())
                query = query.filter(
                    or_(
                        Course.title.ilike(pattern, escape="\\"),
                        Course.description.ilike(pattern, escape="\\"),
                    )
                )
        return query.order_by(Course.order_index.asc(), Course.id.asc()).all()

    def list_featured_courses(self, limit: Optional[int] = None) -> List[Course]:
        limit = limit or settings.FEATURED_COURSES_LIMIT
        return (
            self.db.query(Course)
            .filter(Course.is_featured.is_(True))
            .order_by(Course.order_index.asc(), Course.id.asc())
            .limit(limit)
            .all()
        )

    def get_course(self, course_id: int) -> Course:
        course = self.db.query(Course).filter(Course.id == course_id).first()
        if not course:
            raise ResourceNotFoundException("Course", course_id)
        return course

    def create_course(self, payload: CourseCreate) -> Course:
        course = Course(**payload.model_dump())
        self.db.add(course)
        self.db.commit()
        self.db.refresh(course)
        logger.info("Course created", extra={"course_id": course.id})
        return course

    def update_course(self, course_id: int, payload: CourseUpdate) -> Course:
        course = self.get_course(course_id)
        for field, value in payload.model_dump(exclude_unset=True).items():
            if value is None and field in {"title", "category", "level"}:
                raise ValidationException(f"{field} cannot be empty", field=field)
            setattr(course, field, value)
        self.db.commit()
        self.db.refresh(course)
        return course

    def delete_course(self, course_id: int) -> None:
        course = self.get_course(course_id)
        self.db.delete(course)
        self.db.commit()
        logger.info("Course deleted", extra={"course_id": course_id})


class CertificationService:
    """Idempotent certificate issuance, owner reads and public verification."""

    def __init__(self, db: Session):
        self.db = db

    def _find(self, user_id: int, course_id: int) -> Optional[Certification]:
        return (
            self.db.query(Certification)
            .filter(
                Certification.user_id == user_id,
                Certification.course_id == course_id,
            )
            .first()
        )

    def issue(
        self, user: User, course: Course, issued_at: Optional[datetime] = None
    ) -> Certification:
        """Return the user's certificate for the course, minting it on first call.

        Number collisions are retried with a fresh number. Losing a concurrent
        (user, course) insert returns the row that won.
        """
        existing = self._find(user.id, course.id)
        if existing:
            return existing

        issued_at = issued_at or utcnow()
        skills = skills_for_category(course.category)

        for _ in range(CERTIFICATE_NUMBER_RETRIES):
            number = generate_certificate_number(issued_at.year)
            taken = (
                self.db.query(Certification.id)
                .filter(Certification.certificate_number == number)
                .first()
            )
            if taken:
                continue

            certification = Certification(
                user_id=user.id,
                course_id=course.id,
                certificate_number=number,
                skills_earned=skills,
                issued_at=issued_at,
            )
            self.db.add(certification)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                winner = self._find(user.id, course.id)
                if winner:
                    return winner
                continue

            self.db.refresh(certification)
            logger.info(
                "Certificate issued",
                extra={
                    "user_id": user.id,
                    "course_id": course.id,
                    "certificate_number": number,
                },
            )
            return certification

        raise ResourceConflictException(
            "Could not allocate a unique certificate number",
            details={"course_id": course.id},
        )

    def issue_for_completed_course(self, user: User, course_id: int) -> Certification:
        """Explicit issuance; the user's progress on the course must be completed."""
        course = CourseService(self.db).get_course(course_id)
        progress = (
            self.db.query(CourseProgress)
            .filter(
                CourseProgress.user_id == user.id,
                CourseProgress.course_id == course.id,
            )
            .first()
        )
        if not progress or progress.status != ProgressStatus.COMPLETED:
            raise CourseNotCompletedException(course.id)
        return self.issue(user, course, issued_at=progress.completed_at)

    def list_for_user(self, user: User) -> List[Certification]:
        return (
            self.db.query(Certification)
            .options(joinedload(Certification.course))
            .filter(Certification.user_id == user.id)
            .order_by(Certification.issued_at.desc(), Certification.id.desc())
            .all()
        )

    def get_for_owner(self, user: User, certification_id: int) -> Certification:
        certification = (
            self.db.query(Certification)
            .filter(Certification.id == certification_id)
            .first()
        )
        if not certification:
            raise ResourceNotFoundException("Certification", certification_id)
        if certification.user_id != user.id and not user.is_admin:
            raise OwnershipRequiredException("certification")
        return certification

    def get_for_course(self, user: User, course_id: int) -> Certification:
        certification = self._find(user.id, course_id)
        if not certification:
            raise ResourceNotFoundException("Certification", course_id)
        return certification

    def stats_for_user(self, user: User) -> CertificationStats:
        certifications = self.list_for_user(user)
        skills = sorted(
            {skill for cert in certifications for skill in (cert.skills_earned or [])}
        )
        total_hours = sum(
            (cert.course.duration_hours or 0.0) for cert in certifications if cert.course
        )
        return CertificationStats(
            total_certifications=len(certifications),
            total_skills=len(skills),
            total_hours=total_hours,
            skills=skills,
        )

    def verify(self, certificate_number: str) -> CertificateVerification:
        """Public lookup by certificate number; exposes only name, course and date."""
        row = (
            self.db.query(Certification, User, Course)
            .join(User, User.id == Certification.user_id)
            .join(Course, Course.id == Certification.course_id)
            .filter(Certification.certificate_number == certificate_number.strip())
            .first()
        )
        if not row:
            raise ResourceNotFoundException("Certificate", certificate_number)

        certification, owner, course = row
        return CertificateVerification(
            certificate_number=certification.certificate_number,
            recipient_name=display_name(owner.first_name, owner.last_name)
            or "Certificate holder",
            course_title=course.title,
            course_category=course.category,
            issued_at=certification.issued_at,
        )


class ProgressService:
    """Enrollment and the in_progress -> completed state machine."""

    def __init__(self, db: Session):
        self.db = db

    def _find(self, user_id: int, course_id: int) -> Optional[CourseProgress]:
        return (
            self.db.query(CourseProgress)
            .filter(
                CourseProgress.user_id == user_id,
                CourseProgress.course_id == course_id,
            )
            .first()
        )

    def enroll(self, user: User, course_id: int) -> CourseProgress:
        course = CourseService(self.db).get_course(course_id)
        if self._find(user.id, course.id):
            raise ResourceAlreadyExistsException(
                "Enrollment", message="Already enrolled in this course"
            )

        now = utcnow()
        progress = CourseProgress(
            user_id=user.id,
            course_id=course.id,
            status=ProgressStatus.IN_PROGRESS,
            progress_percentage=0.0,
            started_at=now,
            last_accessed_at=now,
        )
        self.db.add(progress)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost the race against a concurrent enroll for the same pair.
            self.db.rollback()
            raise ResourceAlreadyExistsException(
                "Enrollment", message="Already enrolled in this course"
            )
        self.db.refresh(progress)
        logger.info(
            "User enrolled", extra={"user_id": user.id, "course_id": course.id}
        )
        return progress

    def update_progress(
        self, user: User, course_id: int, percentage: float
    ) -> Tuple[CourseProgress, Optional[Certification]]:
        """Raise progress monotonically; returns the row and any certificate issued."""
        if percentage is None or not 0 <= percentage <= 100:
            raise ValidationException(
                "progress_percentage must be between 0 and 100",
                field="progress_percentage",
            )

        progress = self._find(user.id, course_id)
        if not progress:
            raise ResourceNotFoundException("Enrollment", course_id)

        progress.progress_percentage = max(
            progress.progress_percentage or 0.0, float(percentage)
        )
        progress.last_accessed_at = utcnow()

        just_completed = False
        if (
            progress.status != ProgressStatus.COMPLETED
            and progress.progress_percentage >= settings.COURSE_COMPLETION_THRESHOLD
        ):
            # Conditional so a concurrent completion keeps the first completed_at.
            just_completed = (
                self.db.query(CourseProgress)
                .filter(
                    CourseProgress.id == progress.id,
                    CourseProgress.status != ProgressStatus.COMPLETED,
                )
                .update(
                    {
                        CourseProgress.status: ProgressStatus.COMPLETED,
                        CourseProgress.completed_at: utcnow(),
                    },
                    synchronize_session=False,
                )
                == 1
            )

        self.db.commit()
        self.db.refresh(progress)

        certification = None
        if just_completed:
            logger.info(
                "Course completed", extra={"user_id": user.id, "course_id": course_id}
            )
            if settings.CERTIFICATE_AUTO_ISSUE:
                certification = self._issue_after_completion(user, progress)
        return progress, certification

    def _issue_after_completion(
        self, user: User, progress: CourseProgress
    ) -> Optional[Certification]:
        """Completion is already committed; a failed issuance is retried via the issue endpoint."""
        try:
            return CertificationService(self.db).issue(
                user, progress.course, issued_at=progress.completed_at
            )
        except (AppException, SQLAlchemyError):
            self.db.rollback()
            logger.exception(
                "Certificate issuance after completion failed",
                extra={"user_id": user.id, "course_id": progress.course_id},
            )
            return None

    def list_for_user(self, user: User) -> List[CourseProgress]:
        return (
            self.db.query(CourseProgress)
            .options(joinedload(CourseProgress.course))
            .filter(CourseProgress.user_id == user.id)
            .order_by(CourseProgress.last_accessed_at.desc(), CourseProgress.id.desc())
            .all()
        )

    def get_for_course(self, user: User, course_id: int) -> CourseProgress:
        progress = self._find(user.id, course_id)
        if not progress:
            raise ResourceNotFoundException("Enrollment", course_id)
        return progress


__all__ = [
    "SKILLS_BY_CATEGORY",
    "skills_for_category",
    "generate_certificate_number",
    "CourseService",
    "CertificationService",
    "ProgressService",
]
