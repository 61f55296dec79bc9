"""Password reset tokens.

The plain token is handed to the user once (by email); the database only
keeps its SHA-256 digest. Tokens are single use and issuing a new one
retires any still outstanding for the same user.
"""

import hashlib
import secrets
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from onboarding.core.config import get_settings
from onboarding.core.security import get_password_hash
from onboarding.db.models import PasswordResetToken, User


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def generate_reset_token() -> tuple[str, str]:
    """Return ``(token, token_hash)``."""
    token = secrets.token_urlsafe(32)
    return token, hash_token(token)


def create_reset_token(
    db: Session,
    user_id: UUID,
    *,
    expires_in: Optional[timedelta] = None,
) -> tuple[PasswordResetToken, str]:
    """
    Issue a reset token for a user.

    Returns:
        (token_model, plain_token) tuple
    """
    now = datetime.utcnow()
    lifetime = expires_in or timedelta(minutes=get_settings().password_reset_expire_minutes)

    revoke_reset_tokens(db, user_id)

    plain_token, token_hash = generate_reset_token()
    reset_token = PasswordResetToken(
        user_id=user_id,
        token_hash=token_hash,
        expires_at=now + lifetime,
    )
    db.add(reset_token)
    db.flush()
    return reset_token, plain_token


def revoke_reset_tokens(db: Session, user_id: UUID) -> int:
    """Retire every unused token of a user; returns how many were retired."""
    outstanding = db.query(PasswordResetToken).filter(
        PasswordResetToken.user_id == user_id,
        PasswordResetToken.is_used == False,  # noqa: E712
    ).all()
    for token in outstanding:
        token.is_used = True
    return len(outstanding)


def _find_valid(db: Session, token: str) -> Optional[PasswordResetToken]:
    return db.query(PasswordResetToken).filter(
        PasswordResetToken.token_hash == hash_token(token),
        PasswordResetToken.is_used == False,  # noqa: E712
        PasswordResetToken.expires_at > datetime.utcnow(),
    ).first()


def use_reset_token(db: Session, token: str, new_password: str) -> Optional[User]:
    """
    Set a new password with a reset token.

    Returns the user whose password changed, or None when the token is not
    valid or the account has been deactivated.
    """
    reset_token = _find_valid(db, token)
    if reset_token is None:
        return None

    user = db.get(User, reset_token.user_id)
    if user is None or not user.is_active:
        return None

    user.password_hash = get_password_hash(new_password)
    revoke_reset_tokens(db, user.id)
    reset_token.used_at = datetime.utcnow()
    db.flush()
    return user
