"""Pydantic schemas for course discussions."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class DiscussionCreate(BaseModel):
    # Blank checks happen in the service so they surface as validation_error.
    title: str
    content: str


class ReplyCreate(BaseModel):
    content: str


class DiscussionModeration(BaseModel):
    is_pinned: Optional[bool] = None
    is_locked: Optional[bool] = None


class DiscussionOut(BaseModel):
    id: int
    course_id: int
    user_id: int
    title: str
    content: str
    is_pinned: bool
    is_locked: bool
    view_count: int
    created_at: datetime
    updated_at: Optional[datetime] = None
    author_name: Optional[str] = None
    reply_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class ReplyOut(BaseModel):
    id: int
    discussion_id: int
    user_id: int
    content: str
    is_solution: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    author_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
