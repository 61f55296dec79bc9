"""Pytest configuration and shared fixtures."""

import os

# Settings are read once and cached, so the test environment must be in place
# before anything under onboarding is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_TO_FILE"] = "false"
os.environ.pop("SMTP_HOST", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from onboarding.core.config import get_settings
from onboarding.core.rbac.roles import UserRole
from onboarding.core.security import create_access_token
from onboarding.db import models  # noqa: F401  (registers tables)
from onboarding.db.base import Base

from tests.factories import create_user


@pytest.fixture
def engine():
    """In-memory SQLite engine shared by every connection in a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def client(db_session):
    """TestClient whose requests all run on the test session."""
    from onboarding.api.deps import get_db
    from onboarding.api.main import app

    def override_get_db():
        try:
            yield db_session
        except Exception:
            db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def supplier(db_session):
    user = create_user(db_session, role=UserRole.SUPPLIER, email="supplier@example.com")
    db_session.commit()
    return user


@pytest.fixture
def other_supplier(db_session):
    user = create_user(db_session, role=UserRole.SUPPLIER, email="other.supplier@example.com")
    db_session.commit()
    return user


@pytest.fixture
def procurement_user(db_session):
    user = create_user(db_session, role=UserRole.PROCUREMENT, email="procurement@example.com")
    db_session.commit()
    return user


@pytest.fixture
def legal_user(db_session):
    user = create_user(db_session, role=UserRole.LEGAL, email="legal@example.com")
    db_session.commit()
    return user


@pytest.fixture
def management_user(db_session):
    user = create_user(db_session, role=UserRole.MANAGEMENT, email="management@example.com")
    db_session.commit()
    return user


@pytest.fixture
def admin_user(db_session):
    user = create_user(db_session, role=UserRole.SUPER_ADMIN, email="admin@example.com")
    db_session.commit()
    return user


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture
def smtp_enabled(monkeypatch):
    monkeypatch.setattr(get_settings(), "smtp_host", "smtp.example.com")


@pytest.fixture
def sent_mail(monkeypatch):
    """Messages handed to SMTP, as ``(message, kwargs)`` pairs."""
    sent = []

    async def fake_send(message, **kwargs):
        sent.append((message, kwargs))

    monkeypatch.setattr("onboarding.services.notifications.aiosmtplib.send", fake_send)
    return sent
