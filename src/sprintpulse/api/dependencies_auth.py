from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status, Header
from sqlalchemy.orm import Session

from sprintpulse.api.database import get_db
from sprintpulse.storage.models import UserModel
from sprintpulse.storage.repositories.user_repository import UserRepository

# Set by the session provider in front of the API
API_KEY_HEADER = "X-User-ID"


def get_user_repository() -> UserRepository:
    return UserRepository()


def get_current_user(
    x_user_id: Annotated[Optional[str], Header(alias=API_KEY_HEADER)] = None,
    db: Session = Depends(get_db),
    user_repo: UserRepository = Depends(get_user_repository),
) -> Optional[UserModel]:
    """
    Resolve the X-User-ID header to a stored user.

    Returns None when the header is absent; an unknown id is rejected.
    """
    if not x_user_id:
        return None

    user = user_repo.get(db, x_user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )
    return user


def require_current_user(
    user: Annotated[Optional[UserModel], Depends(get_current_user)]
) -> UserModel:
    """Enforce that a user is authenticated."""
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )
    return user
