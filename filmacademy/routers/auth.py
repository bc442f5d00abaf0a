"""Authentication router: registration and password login."""

from fastapi import APIRouter, Depends, Request, status
from fastapi.security.oauth2 import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from filmacademy import oauth2
from filmacademy.core.database import get_db
from filmacademy.core.middleware.rate_limit import limiter
from filmacademy.modules.users.schemas import Token, UserCreate, UserOut
from filmacademy.modules.users.service import UserService

router = APIRouter(tags=["Authentication"])


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=UserOut)
@limiter.limit("10/hour")
def register_user(
    request: Request,
    payload: UserCreate,
    db: Session = Depends(get_db),
):
    """Register a new learner account."""
    return UserService(db).create_user(payload)


@router.post("/login", response_model=Token)
@limiter.limit("6/minute")
def login(
    request: Request,
    user_credentials: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    """Exchange email (sent as `username`) and password for a bearer token."""
    user = UserService(db).authenticate(
        user_credentials.username, user_credentials.password
    )
    access_token = oauth2.create_access_token(data={"user_id": user.id})
    return {"access_token": access_token, "token_type": "bearer"}
