# filmacademy/modules/learning/models.py - Course catalog, progress and certification models

from __future__ import annotations

import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import relationship

from filmacademy.core.database import Base
from filmacademy.core.db_defaults import timestamp_default, utcnow
from filmacademy.models.types import array_type


class ProgressStatus(str, enum.Enum):
    # NOT_STARTED is never stored: a missing row encodes it.
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Course(Base):
    """A course in the academy catalog."""

    __tablename__ = "academy_courses"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=False, index=True)
    instructor = Column(String, nullable=True)
    level = Column(String, nullable=False, default="beginner", index=True)
    duration_hours = Column(Float, nullable=False, default=0.0)
    thumbnail_url = Column(String, nullable=True)
    video_url = Column(String, nullable=True)
    materials_url = Column(String, nullable=True)
    related_tool = Column(String, nullable=True, index=True)
    price_credits = Column(Integer, nullable=False, default=0)
    is_featured = Column(Boolean, nullable=False, default=False)
    order_index = Column(Integer, nullable=False, default=0)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=timestamp_default(),
    )
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    quizzes = relationship(
        "CourseQuiz",
        back_populates="course",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    progress_rows = relationship(
        "CourseProgress",
        back_populates="course",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    discussions = relationship(
        "CourseDiscussion",
        back_populates="course",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    certifications = relationship(
        "Certification",
        back_populates="course",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class CourseProgress(Base):
    """Per-user enrollment and progress for a course."""

    __tablename__ = "user_course_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_user_course_progress"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id = Column(
        Integer,
        ForeignKey("academy_courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status = Column(
        SQLAlchemyEnum(ProgressStatus, name="progress_status_enum"),
        nullable=False,
        default=ProgressStatus.IN_PROGRESS,
    )
    progress_percentage = Column(Float, nullable=False, default=0.0)

    started_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    last_accessed_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="course_progress")
    course = relationship("Course", back_populates="progress_rows")


class Certification(Base):
    """Certificate issued once per (user, course) on completion."""

    __tablename__ = "user_certifications"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_user_certification_course"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id = Column(
        Integer,
        ForeignKey("academy_courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    certificate_number = Column(String, unique=True, nullable=False)
    skills_earned = Column(array_type(String), nullable=False, default=list)
    issued_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="certifications")
    course = relationship("Course", back_populates="certifications")


__all__ = ["ProgressStatus", "Course", "CourseProgress", "Certification"]
