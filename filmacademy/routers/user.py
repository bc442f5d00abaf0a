"""Profile endpoints for the signed-in user."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from filmacademy import oauth2
from filmacademy.core.database import get_db
from filmacademy.modules.users.models import User
from filmacademy.modules.users.schemas import UserOut, UserUpdate
from filmacademy.modules.users.service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserOut)
def read_me(current_user: User = Depends(oauth2.get_current_user)):
    return current_user


@router.patch("/me", response_model=UserOut)
def update_me(
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(oauth2.get_current_user),
):
    """Update first/last name (shown on certificates)."""
    return UserService(db).update_profile(current_user, payload)
