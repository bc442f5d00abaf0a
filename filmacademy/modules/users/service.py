"""Application services for the users domain."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from filmacademy.core.exceptions import (
    InvalidCredentialsException,
    ResourceAlreadyExistsException,
    ResourceNotFoundException,
)
from filmacademy.modules.utils import security

from .models import User, UserRole
from .schemas import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    """Encapsulates user-centric business logic shared across routers."""

    def __init__(self, db: Session):
        self.db = db

    def create_user(
        self, payload: UserCreate, role: UserRole = UserRole.USER
    ) -> User:
        """Create a new user after validating email uniqueness."""
        email = payload.email.lower()
        if self.get_by_email(email):
            raise ResourceAlreadyExistsException("User", field="email")

        new_user = User(
            email=email,
            hashed_password=security.hash(payload.password),
            first_name=payload.first_name,
            last_name=payload.last_name,
            role=role,
        )
        self.db.add(new_user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ResourceAlreadyExistsException("User", field="email")
        self.db.refresh(new_user)
        logger.info("User registered", extra={"user_id": new_user.id})
        return new_user

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def get_user_or_404(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise ResourceNotFoundException("User", user_id)
        return user

    def authenticate(self, email: str, password: str) -> User:
        """Return the user matching the credentials or raise 401."""
        user = self.get_by_email(email)
        if not user or not security.verify(password, user.hashed_password):
            logger.warning("Failed login attempt")
            raise InvalidCredentialsException()
        return user

    def update_profile(self, user: User, payload: UserUpdate) -> User:
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(user, field, value)
        self.db.commit()
        self.db.refresh(user)
        return user


__all__ = ["UserService"]
