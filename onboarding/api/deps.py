from typing import Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from onboarding.db.session import SessionLocal
from onboarding.db.models import User
from onboarding.core.security import decode_token
from onboarding.core.rbac.roles import UserRole
from onboarding.core.workflow.policy import Actor

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_db() -> Generator:
    """Request-scoped session. Anything left uncommitted by a failed request is rolled back."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_current_user(
    db: Session = Depends(get_db),
    token: str = Depends(oauth2_scheme),
) -> User:
    """The active user named by the bearer token; 401 otherwise."""
    user_id = decode_token(token) if token else None
    user = db.get(User, user_id) if user_id else None

    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_actor(current_user: User = Depends(get_current_user)) -> Actor:
    """The acting principal handed to the workflow engine."""
    return Actor(id=current_user.id, role=UserRole(current_user.role))
