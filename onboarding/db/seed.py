"""Database seeding for the onboarding portal.

Bootstraps the first super administrator from settings.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from onboarding.core.config import get_settings
from onboarding.core.rbac.roles import UserRole
from onboarding.services import accounts
from onboarding.db.models import User

logger = logging.getLogger(__name__)


def seed_super_admin(
    db: Session,
    *,
    email: Optional[str] = None,
    password: Optional[str] = None,
) -> Optional[User]:
    """
    Create the super administrator account if it does not exist yet.

    Idempotent: an existing account with the same email is returned as is.

    Args:
        db: Database session
        email: Admin email (defaults to ``ADMIN_EMAIL``)
        password: Admin password (defaults to ``ADMIN_PASSWORD``)

    Returns:
        The admin user, or None when no credentials are configured
    """
    settings = get_settings()
    email = (email or settings.admin_email or "").strip().lower()
    password = password or settings.admin_password

    if not email or not password:
        logger.warning("No admin credentials configured; skipping super admin seed")
        return None

    existing = accounts.find_by_email(db, email)
    if existing:
        return existing

    admin = accounts.create_account(
        db,
        email=email,
        password=password,
        first_name="System",
        last_name="Administrator",
        role=UserRole.SUPER_ADMIN,
    )
    return admin


# CLI script for seeding
if __name__ == "__main__":
    import sys
    from onboarding.db.session import SessionLocal

    db = SessionLocal()
    try:
        admin = seed_super_admin(db)
        db.commit()
        if admin is None:
            print("ADMIN_EMAIL and ADMIN_PASSWORD must be set to seed a super admin")
            sys.exit(1)
        print(f"Super admin ready: {admin.email} (ID: {admin.id})")

    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        db.close()
