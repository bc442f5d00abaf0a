"""Learning domain: course catalog, progress tracking and certifications."""

from .models import Certification, Course, CourseProgress, ProgressStatus

__all__ = ["Certification", "Course", "CourseProgress", "ProgressStatus"]
