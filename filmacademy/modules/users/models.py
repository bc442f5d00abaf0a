"""SQLAlchemy models and enums for the users domain."""

from __future__ import annotations

import enum

from sqlalchemy import Column, Integer, String
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql.sqltypes import TIMESTAMP

from filmacademy.core.database import Base
from filmacademy.core.db_defaults import timestamp_default, utcnow
from filmacademy.modules.utils.text import display_name


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"


class User(Base):
    """Academy learner or administrator."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, nullable=False)
    email = Column(String, nullable=False, unique=True)
    hashed_password = Column(String, nullable=False)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    role = Column(
        SQLAlchemyEnum(UserRole, name="user_role_enum"),
        default=UserRole.USER,
        nullable=False,
    )
    created_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=timestamp_default(),
    )

    course_progress = relationship(
        "CourseProgress", back_populates="user", cascade="all, delete-orphan"
    )
    certifications = relationship(
        "Certification", back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def display_name(self):
        return display_name(self.first_name, self.last_name)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


__all__ = ["UserRole", "User"]
