"""Pydantic schemas for the course catalog, progress and certifications."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import ProgressStatus


class CourseBase(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    category: str = Field(min_length=1)
    instructor: Optional[str] = None
    level: str = "beginner"
    duration_hours: float = Field(default=0.0, ge=0)
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None
    materials_url: Optional[str] = None
    related_tool: Optional[str] = None
    price_credits: int = Field(default=0, ge=0)
    is_featured: bool = False
    order_index: int = 0


class CourseCreate(CourseBase):
    pass


class CourseUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, min_length=1)
    instructor: Optional[str] = None
    level: Optional[str] = None
    duration_hours: Optional[float] = Field(default=None, ge=0)
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None
    materials_url: Optional[str] = None
    related_tool: Optional[str] = None
    price_credits: Optional[int] = Field(default=None, ge=0)
    is_featured: Optional[bool] = None
    order_index: Optional[int] = None


class CourseOut(CourseBase):
    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CourseFilters(BaseModel):
    category: Optional[str] = None
    level: Optional[str] = None
    related_tool: Optional[str] = None
    search: Optional[str] = None


class CourseSummary(BaseModel):
    id: int
    title: str
    category: str
    level: str
    duration_hours: float
    thumbnail_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# ==================== Progress ====================


class ProgressUpdate(BaseModel):
    progress_percentage: float = Field(ge=0, le=100)


class ProgressOut(BaseModel):
    id: int
    user_id: int
    course_id: int
    status: ProgressStatus
    progress_percentage: float
    started_at: datetime
    completed_at: Optional[datetime] = None
    last_accessed_at: datetime
    course: Optional[CourseSummary] = None

    model_config = ConfigDict(from_attributes=True)


class ProgressUpdateOut(ProgressOut):
    certification: Optional["CertificationOut"] = None


# ==================== Certifications ====================


class CertificationIssueRequest(BaseModel):
    course_id: int


class CertificationOut(BaseModel):
    id: int
    user_id: int
    course_id: int
    certificate_number: str
    skills_earned: List[str]
    issued_at: datetime
    course: Optional[CourseSummary] = None

    model_config = ConfigDict(from_attributes=True)


class CertificationStats(BaseModel):
    total_certifications: int
    total_skills: int
    total_hours: float
    skills: List[str]


class CertificateVerification(BaseModel):
    """Public view of a certificate; carries nothing beyond name, course and date."""

    certificate_number: str
    recipient_name: str
    course_title: str
    course_category: str
    issued_at: datetime
    valid: bool = True


ProgressUpdateOut.model_rebuild()
