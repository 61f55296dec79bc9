"""User accounts: creation, credentials and deactivation.

Shared by supplier self-registration, user administration and the super
admin seed. Emails are stored lower-cased.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy.orm import Session

from onboarding.core.password_reset import revoke_reset_tokens
from onboarding.core.rbac.roles import UserRole
from onboarding.core.security import get_password_hash, verify_password
from onboarding.core.workflow.errors import ConflictError, ValidationError
from onboarding.db.models import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def find_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def create_account(
    db: Session,
    *,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    role: UserRole,
    phone: Optional[str] = None,
    department: Optional[str] = None,
) -> User:
    """
    Create an active user account.

    Raises:
        ConflictError: If the email is already registered
    """
    if find_by_email(db, email) is not None:
        raise ConflictError(f"Email {normalize_email(email)} is already registered")

    user = User(
        id=uuid.uuid4(),
        email=normalize_email(email),
        password_hash=get_password_hash(password),
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        department=department,
        role=UserRole(role).value,
        is_active=True,
    )
    db.add(user)
    db.flush()

    logger.info("Created %s account %s", user.role, user.email)
    return user


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    """The user owning these credentials, or None. Inactive users are returned too."""
    user = find_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def set_password(db: Session, user: User, new_password: str) -> None:
    """Replace the password and retire any outstanding reset tokens."""
    user.password_hash = get_password_hash(new_password)
    revoke_reset_tokens(db, user.id)
    db.flush()
    logger.info("Password changed for %s", user.email)


def change_password(db: Session, user: User, current_password: str, new_password: str) -> None:
    """
    Self-service password change.

    Raises:
        ValidationError: If the current password does not match
    """
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect", action="change_password")
    set_password(db, user, new_password)


def deactivate(db: Session, user: User) -> User:
    """Soft delete: the account stays for history but can no longer sign in."""
    user.is_active = False
    revoke_reset_tokens(db, user.id)
    db.flush()
    logger.info("Deactivated account %s", user.email)
    return user
