"""Course discussion threads, replies and solution marking."""

from __future__ import annotations

import logging
from typing import List

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from filmacademy.core.db_defaults import utcnow
from filmacademy.core.exceptions import (
    DiscussionLockedException,
    PermissionDeniedException,
    ResourceConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from filmacademy.modules.learning.service import CourseService
from filmacademy.modules.users.models import User
from filmacademy.modules.utils.text import is_blank

from .models import CourseDiscussion, DiscussionReply
from .schemas import DiscussionModeration, DiscussionOut, ReplyOut

logger = logging.getLogger(__name__)


def _author_name(obj) -> str | None:
    return obj.author.display_name if obj.author else None


def _discussion_out(discussion: CourseDiscussion, reply_count: int) -> DiscussionOut:
    return DiscussionOut.model_validate(discussion).model_copy(
        update={"author_name": _author_name(discussion), "reply_count": reply_count}
    )


def _reply_out(reply: DiscussionReply) -> ReplyOut:
    return ReplyOut.model_validate(reply).model_copy(
        update={"author_name": _author_name(reply)}
    )


class DiscussionService:
    """Per-course Q&A threads."""

    def __init__(self, db: Session):
        self.db = db

    def _reply_counts(self):
        return (
            self.db.query(
                DiscussionReply.discussion_id.label("discussion_id"),
                func.count(DiscussionReply.id).label("reply_count"),
            )
            .group_by(DiscussionReply.discussion_id)
            .subquery()
        )

    def _get(self, discussion_id: int) -> CourseDiscussion:
        discussion = (
            self.db.query(CourseDiscussion)
            .filter(CourseDiscussion.id == discussion_id)
            .first()
        )
        if not discussion:
            raise ResourceNotFoundException("Discussion", discussion_id)
        return discussion

    def _reply_count(self, discussion_id: int) -> int:
        return (
            self.db.query(func.count(DiscussionReply.id))
            .filter(DiscussionReply.discussion_id == discussion_id)
            .scalar()
            or 0
        )

    def list_discussions(self, course_id: int) -> List[DiscussionOut]:
        """Pinned first, then newest first, each with its reply count."""
        CourseService(self.db).get_course(course_id)
        counts = self._reply_counts()
        rows = (
            self.db.query(CourseDiscussion, func.coalesce(counts.c.reply_count, 0))
            .outerjoin(counts, counts.c.discussion_id == CourseDiscussion.id)
            .options(joinedload(CourseDiscussion.author))
            .filter(CourseDiscussion.course_id == course_id)
            .order_by(
                CourseDiscussion.is_pinned.desc(),
                CourseDiscussion.created_at.desc(),
                CourseDiscussion.id.desc(),
            )
            .all()
        )
        return [_discussion_out(discussion, count) for discussion, count in rows]

    def get_discussion(self, discussion_id: int) -> DiscussionOut:
        """Fetch a discussion and count the view with a single UPDATE."""
        updated = (
            self.db.query(CourseDiscussion)
            .filter(CourseDiscussion.id == discussion_id)
            .update(
                {CourseDiscussion.view_count: CourseDiscussion.view_count + 1},
                synchronize_session=False,
            )
        )
        if not updated:
            raise ResourceNotFoundException("Discussion", discussion_id)
        self.db.commit()

        discussion = self._get(discussion_id)
        return _discussion_out(discussion, self._reply_count(discussion_id))

    def create_discussion(
        self, user: User, course_id: int, title: str, content: str
    ) -> DiscussionOut:
        if is_blank(title):
            raise ValidationException("Title is required", field="title")
        if is_blank(content):
            raise ValidationException("Content is required", field="content")

        course = CourseService(self.db).get_course(course_id)
        discussion = CourseDiscussion(
            course_id=course.id,
            user_id=user.id,
            title=title.strip(),
            content=content.strip(),
        )
        self.db.add(discussion)
        self.db.commit()
        self.db.refresh(discussion)
        logger.info(
            "Discussion created",
            extra={"user_id": user.id, "course_id": course.id},
        )
        return _discussion_out(discussion, 0)

    def list_replies(self, discussion_id: int) -> List[ReplyOut]:
        """Solution first, then oldest first."""
        self._get(discussion_id)
        replies = (
            self.db.query(DiscussionReply)
            .options(joinedload(DiscussionReply.author))
            .filter(DiscussionReply.discussion_id == discussion_id)
            .order_by(
                DiscussionReply.is_solution.desc(),
                DiscussionReply.created_at.asc(),
                DiscussionReply.id.asc(),
            )
            .all()
        )
        return [_reply_out(reply) for reply in replies]

    def create_reply(self, user: User, discussion_id: int, content: str) -> ReplyOut:
        if is_blank(content):
            raise ValidationException("Content is required", field="content")

        discussion = self._get(discussion_id)
        if discussion.is_locked:
            raise DiscussionLockedException(discussion.id)

        reply = DiscussionReply(
            discussion_id=discussion.id, user_id=user.id, content=content.strip()
        )
        self.db.add(reply)
        discussion.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(reply)
        return _reply_out(reply)

    def _clear_other_solutions(self, discussion_id: int, keep_reply_id: int) -> None:
        self.db.query(DiscussionReply).filter(
            DiscussionReply.discussion_id == discussion_id,
            DiscussionReply.id != keep_reply_id,
            DiscussionReply.is_solution.is_(True),
        ).update({DiscussionReply.is_solution: False}, synchronize_session=False)

    def mark_as_solution(self, user: User, reply_id: int) -> ReplyOut:
        """Make `reply` the only solution of its discussion."""
        reply = (
            self.db.query(DiscussionReply).filter(DiscussionReply.id == reply_id).first()
        )
        if not reply:
            raise ResourceNotFoundException("Reply", reply_id)

        discussion = reply.discussion
        if discussion.user_id != user.id and not user.is_admin:
            raise PermissionDeniedException(
                "Only the discussion author can mark a solution"
            )

        # The bulk clear is emitted before the flag below is flushed, so the
        # partial unique index never sees two solutions.
        self._clear_other_solutions(discussion.id, reply.id)
        reply.is_solution = True
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ResourceConflictException(
                "Another solution was marked at the same time",
                details={"discussion_id": discussion.id},
            )
        self.db.refresh(reply)
        logger.info(
            "Reply marked as solution",
            extra={"user_id": user.id, "reply_id": reply.id},
        )
        return _reply_out(reply)

    def moderate(
        self, discussion_id: int, payload: DiscussionModeration
    ) -> DiscussionOut:
        discussion = self._get(discussion_id)
        for field, value in payload.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(discussion, field, value)
        self.db.commit()
        self.db.refresh(discussion)
        return _discussion_out(discussion, self._reply_count(discussion.id))


__all__ = ["DiscussionService"]
