"""JWT utilities for auth.

Responsibilities:
- Create and verify HS256-signed access tokens with expirations.
- Resolve the acting user (and admin) from the bearer token for every mutating route.
- Surface the application's 401/403 error kinds for missing, invalid or unauthorized tokens.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from filmacademy.core.config import settings
from filmacademy.core.database import get_db
from filmacademy.core.exceptions import (
    AuthenticationRequiredException,
    InvalidTokenException,
    PermissionDeniedException,
)
from filmacademy.modules.users.models import User, UserRole
from filmacademy.modules.users.schemas import TokenData

logger = logging.getLogger(__name__)

# auto_error=False so a missing header becomes authentication_required, not a bare 401.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="login", auto_error=False)

ALGORITHM = settings.algorithm
ACCESS_TOKEN_EXPIRE_MINUTES = settings.access_token_expire_minutes


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token; `user_id` is normalized to int."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})

    if "user_id" in to_encode:
        try:
            to_encode["user_id"] = int(to_encode["user_id"])
        except (TypeError, ValueError):
            logger.error(f"Invalid user_id format: {to_encode['user_id']}")
            raise ValueError("Invalid user_id format")

    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def verify_access_token(token: str) -> TokenData:
    """Decode a token and return its TokenData, or raise InvalidTokenException."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT Error: {str(e)}")
        raise InvalidTokenException()

    user_id = payload.get("user_id")
    if user_id is None:
        logger.warning("User ID not found in token payload")
        raise InvalidTokenException()
    try:
        return TokenData(id=int(user_id))
    except (TypeError, ValueError):
        raise InvalidTokenException()


def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Return the authenticated user or raise `authentication_required`."""
    if not token:
        raise AuthenticationRequiredException()

    token_data = verify_access_token(token)
    user = db.query(User).filter(User.id == token_data.id).first()
    if user is None:
        raise InvalidTokenException()

    # Picked up by LoggingMiddleware for the access log.
    request.state.user_id = user.id
    return user


def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    """Return current user if admin; otherwise raise 403."""
    if current_user.role != UserRole.ADMIN:
        raise PermissionDeniedException("Admin privileges required")
    return current_user
