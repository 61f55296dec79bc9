"""Authentication endpoints: supplier self-registration, token login and passwords."""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from onboarding.api.deps import get_db, get_current_user
from onboarding.api.schemas.auth import (
    ForgotPassword,
    PasswordChange,
    PasswordReset,
    Token,
    UserCreate,
    UserResponse,
)
from onboarding.api.schemas.common import MessageResponse
from onboarding.core.password_reset import create_reset_token, use_reset_token
from onboarding.core.rbac.roles import UserRole
from onboarding.core.security import create_access_token
from onboarding.db.models import User
from onboarding.services import accounts
from onboarding.services.notifications import NotificationService

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "If an account with that email exists, a password reset link has been sent."


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(user_in: UserCreate, db: Session = Depends(get_db)):
    """Suppliers register themselves; staff accounts come from a super admin."""
    user = accounts.create_account(db, role=UserRole.SUPPLIER, **user_in.model_dump())
    db.commit()
    return UserResponse.model_validate(user)


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    """Exchange email (as ``username``) and password for a bearer token."""
    user = accounts.authenticate(db, form_data.username, form_data.password)
    if user is None:
        logger.info("Failed login for %s", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated",
        )

    user.last_login = datetime.utcnow()
    db.commit()
    return Token(access_token=create_access_token(user.id, user.role))


@router.get("/me", response_model=UserResponse)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/change-password", response_model=MessageResponse)
def change_password(
    password_in: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    accounts.change_password(db, current_user, password_in.current_password, password_in.new_password)
    db.commit()
    return MessageResponse(message="Password updated")


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(request_in: ForgotPassword, db: Session = Depends(get_db)):
    """
    Email a single-use reset link.

    The response is the same whether or not the account exists.
    """
    user = accounts.find_by_email(db, request_in.email)
    if user is None or not user.is_active:
        logger.info("Password reset requested for unknown or inactive account %s", request_in.email)
        return MessageResponse(message=RESET_REQUESTED_MESSAGE)

    _, token = create_reset_token(db, user.id)
    db.commit()
    await NotificationService(db).send_password_reset(user, token)
    return MessageResponse(message=RESET_REQUESTED_MESSAGE)


@router.post("/reset-password/{token}", response_model=MessageResponse)
def reset_password(token: str, password_in: PasswordReset, db: Session = Depends(get_db)):
    user = use_reset_token(db, token, password_in.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired reset token",
        )
    db.commit()
    logger.info("Password reset completed for %s", user.email)
    return MessageResponse(message="Password has been reset")
