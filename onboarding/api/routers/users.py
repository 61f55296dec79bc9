"""User administration endpoints (super admin only).

Accounts are never hard deleted; DELETE deactivates.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from onboarding.api.deps import get_db, get_current_user
from onboarding.api.schemas.auth import PasswordReset, StaffUserCreate, UserUpdate, UserResponse
from onboarding.api.schemas.common import MessageResponse
from onboarding.db.models import User
from onboarding.core.rbac import require_permission
from onboarding.services import accounts

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)


def _load_user(db: Session, user_id: UUID) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("", response_model=List[UserResponse])
@require_permission("users:manage")
async def list_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    role: Optional[str] = None,
):
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    return query.order_by(User.created_at).all()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@require_permission("users:manage")
async def create_user(
    user_in: StaffUserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create an account with any role."""
    user = accounts.create_account(db, **user_in.model_dump())
    db.commit()

    logger.info("User %s created %s account %s", current_user.email, user.role, user.email)
    return UserResponse.model_validate(user)


@router.patch("/{user_id}", response_model=UserResponse)
@require_permission("users:manage")
async def update_user(
    user_id: UUID,
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = _load_user(db, user_id)

    changes = user_in.model_dump(exclude_unset=True)
    cleared = [field for field, value in changes.items() if value is None and not User.__table__.c[field].nullable]
    if cleared:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{', '.join(cleared)} cannot be cleared",
        )
    if user.id == current_user.id and (changes.get("is_active") is False or "role" in changes):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot deactivate or change the role of your own account"
        )

    for field, value in changes.items():
        setattr(user, field, value.value if field == "role" and value is not None else value)

    db.commit()
    db.refresh(user)
    return user


@router.delete("/{user_id}", response_model=UserResponse)
@require_permission("users:manage")
async def deactivate_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Deactivate an account. Rows are kept so history stays attributable."""
    user = _load_user(db, user_id)
    if user.id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot deactivate your own account"
        )

    accounts.deactivate(db, user)
    db.commit()
    return UserResponse.model_validate(user)


@router.post("/{user_id}/reset-password", response_model=MessageResponse)
@require_permission("users:manage")
async def reset_user_password(
    user_id: UUID,
    password_in: PasswordReset,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = _load_user(db, user_id)
    accounts.set_password(db, user, password_in.password)
    db.commit()

    logger.info("User %s reset the password of %s", current_user.email, user.email)
    return MessageResponse(message="Password reset successfully")
