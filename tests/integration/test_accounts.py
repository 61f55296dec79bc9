"""Tests for account creation and credential checks."""

import pytest

from onboarding.core.rbac.roles import UserRole
from onboarding.core.workflow.errors import ConflictError
from onboarding.services import accounts
from tests.factories import TEST_PASSWORD, create_user


def test_create_account_normalizes_email(db_session):
    user = accounts.create_account(
        db_session,
        email="  Jane.Doe@Example.COM ",
        password="longenough",
        first_name="Jane",
        last_name="Doe",
        role=UserRole.LEGAL,
        department="Legal",
    )

    assert user.email == "jane.doe@example.com"
    assert user.role == "legal"
    assert user.is_active
    assert accounts.find_by_email(db_session, "JANE.DOE@example.com") is user


def test_create_account_rejects_taken_email(db_session):
    create_user(db_session, email="taken@example.com")

    with pytest.raises(ConflictError):
        accounts.create_account(
            db_session,
            email="Taken@Example.com",
            password="longenough",
            first_name="Other",
            last_name="Person",
            role=UserRole.SUPPLIER,
        )


def test_authenticate(db_session):
    user = create_user(db_session, email="login@example.com")

    assert accounts.authenticate(db_session, "LOGIN@example.com", TEST_PASSWORD) is user
    assert accounts.authenticate(db_session, "login@example.com", "wrong-password") is None
    assert accounts.authenticate(db_session, "nobody@example.com", TEST_PASSWORD) is None


def test_authenticate_returns_inactive_users(db_session):
    user = create_user(db_session, email="gone@example.com", is_active=False)

    assert accounts.authenticate(db_session, "gone@example.com", TEST_PASSWORD) is user
