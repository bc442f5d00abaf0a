"""SQLAlchemy models for course discussions and replies."""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import relationship

from filmacademy.core.database import Base
from filmacademy.core.db_defaults import utcnow


class CourseDiscussion(Base):
    """Question or topic opened on a course."""

    __tablename__ = "course_discussions"

    id = Column(Integer, primary_key=True)
    course_id = Column(
        Integer,
        ForeignKey("academy_courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    is_pinned = Column(Boolean, nullable=False, default=False)
    is_locked = Column(Boolean, nullable=False, default=False)
    view_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    course = relationship("Course", back_populates="discussions")
    author = relationship("User")
    replies = relationship(
        "DiscussionReply",
        back_populates="discussion",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class DiscussionReply(Base):
    """Reply in a discussion thread; at most one per discussion is the solution."""

    __tablename__ = "discussion_replies"
    __table_args__ = (
        Index(
            "uq_discussion_replies_solution",
            "discussion_id",
            unique=True,
            postgresql_where=text("is_solution"),
            sqlite_where=text("is_solution = 1"),
        ),
    )

    id = Column(Integer, primary_key=True)
    discussion_id = Column(
        Integer,
        ForeignKey("course_discussions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content = Column(Text, nullable=False)
    is_solution = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    discussion = relationship("CourseDiscussion", back_populates="replies")
    author = relationship("User")


__all__ = ["CourseDiscussion", "DiscussionReply"]
