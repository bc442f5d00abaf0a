"""Discussion forum package exports."""

from .models import CourseDiscussion, DiscussionReply

__all__ = ["CourseDiscussion", "DiscussionReply"]
