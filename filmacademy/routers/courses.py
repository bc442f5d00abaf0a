"""Public course catalog."""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from filmacademy.core.database import get_db
from filmacademy.modules.learning.schemas import CourseFilters, CourseOut
from filmacademy.modules.learning.service import CourseService

router = APIRouter(prefix="/courses", tags=["Courses"])


def get_course_service(db: Session = Depends(get_db)) -> CourseService:
    """Provide a CourseService instance via FastAPI dependency injection."""
    return CourseService(db)


@router.get("", response_model=List[CourseOut])
def list_courses(
    category: Optional[str] = None,
    level: Optional[str] = None,
    related_tool: Optional[str] = None,
    search: Optional[str] = None,
    service: CourseService = Depends(get_course_service),
):
    """List courses by `order_index`, optionally filtered."""
    filters = CourseFilters(
        category=category, level=level, related_tool=related_tool, search=search
    )
    return service.list_courses(filters)


@router.get("/featured", response_model=List[CourseOut])
def list_featured_courses(service: CourseService = Depends(get_course_service)):
    return service.list_featured_courses()


@router.get("/{course_id}", response_model=CourseOut)
def get_course(course_id: int, service: CourseService = Depends(get_course_service)):
    return service.get_course(course_id)
