"""Tests for password reset tokens and the password endpoints."""

import re
from datetime import timedelta

import pytest

from onboarding.core.password_reset import (
    create_reset_token,
    generate_reset_token,
    hash_token,
    use_reset_token,
)
from onboarding.core.security import verify_password
from onboarding.db.models import PasswordResetToken

from conftest import auth_headers
from tests.factories import TEST_PASSWORD, create_user


def reset_link_token(message) -> str:
    body = message.get_payload()[0].get_payload(decode=True).decode()
    return re.search(r"/reset-password/([A-Za-z0-9_-]+)", body).group(1)


def test_generate_reset_token():
    token, token_hash = generate_reset_token()

    assert len(token) > 20
    assert token_hash == hash_token(token)
    assert len(token_hash) == 64


class TestResetTokens:

    def test_only_the_hash_is_stored(self, db_session, supplier):
        reset_token, plain = create_reset_token(db_session, supplier.id)

        assert reset_token.token_hash == hash_token(plain)
        assert reset_token.token_hash != plain
        assert reset_token.is_used is False

    def test_use_token(self, db_session, supplier):
        reset_token, plain = create_reset_token(db_session, supplier.id)

        user = use_reset_token(db_session, plain, "brand-new-pass")

        assert user.id == supplier.id
        assert verify_password("brand-new-pass", supplier.password_hash)
        assert reset_token.is_used is True
        assert reset_token.used_at is not None

    def test_token_is_single_use(self, db_session, supplier):
        _, plain = create_reset_token(db_session, supplier.id)
        use_reset_token(db_session, plain, "brand-new-pass")

        assert use_reset_token(db_session, plain, "another-pass") is None
        assert verify_password("brand-new-pass", supplier.password_hash)

    def test_expired_token(self, db_session, supplier):
        _, plain = create_reset_token(db_session, supplier.id, expires_in=timedelta(minutes=-1))

        assert use_reset_token(db_session, plain, "brand-new-pass") is None
        assert verify_password(TEST_PASSWORD, supplier.password_hash)

    def test_new_token_retires_old_ones(self, db_session, supplier):
        first, first_plain = create_reset_token(db_session, supplier.id)
        _, second_plain = create_reset_token(db_session, supplier.id)

        assert first.is_used is True
        assert use_reset_token(db_session, first_plain, "brand-new-pass") is None
        assert use_reset_token(db_session, second_plain, "brand-new-pass") is not None

    def test_deactivated_account(self, db_session):
        user = create_user(db_session, is_active=False)
        _, plain = create_reset_token(db_session, user.id)

        assert use_reset_token(db_session, plain, "brand-new-pass") is None

    def test_unknown_token(self, db_session):
        assert use_reset_token(db_session, "not-a-token", "brand-new-pass") is None


class TestForgotPassword:

    def test_reset_by_email(self, client, db_session, smtp_enabled, sent_mail, supplier):
        response = client.post("/api/auth/forgot-password", json={"email": "Supplier@Example.com"})
        assert response.status_code == 200

        message, _ = sent_mail[0]
        assert message["To"] == "supplier@example.com"
        token = reset_link_token(message)

        response = client.post(f"/api/auth/reset-password/{token}", json={"password": "brand-new-pass"})
        assert response.status_code == 200

        response = client.post("/api/auth/login", data={
            "username": "supplier@example.com",
            "password": "brand-new-pass",
        })
        assert response.status_code == 200

        response = client.post(f"/api/auth/reset-password/{token}", json={"password": "yet-another-pass"})
        assert response.status_code == 400

    def test_unknown_email_gets_the_same_answer(self, client, db_session, smtp_enabled, sent_mail, supplier):
        known = client.post("/api/auth/forgot-password", json={"email": "supplier@example.com"})
        unknown = client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"})

        assert unknown.status_code == 200
        assert unknown.json() == known.json()
        assert len(sent_mail) == 1
        assert db_session.query(PasswordResetToken).count() == 1

    def test_token_still_issued_without_smtp(self, client, db_session, supplier):
        response = client.post("/api/auth/forgot-password", json={"email": "supplier@example.com"})

        assert response.status_code == 200
        assert db_session.query(PasswordResetToken).filter(
            PasswordResetToken.user_id == supplier.id
        ).count() == 1

    def test_invalid_token(self, client):
        response = client.post("/api/auth/reset-password/bogus", json={"password": "brand-new-pass"})
        assert response.status_code == 400

    def test_short_password(self, client, db_session, supplier):
        _, plain = create_reset_token(db_session, supplier.id)
        db_session.commit()

        response = client.post(f"/api/auth/reset-password/{plain}", json={"password": "short"})
        assert response.status_code == 422


class TestChangePassword:

    def test_change(self, client, supplier):
        response = client.put("/api/auth/change-password", json={
            "current_password": TEST_PASSWORD,
            "new_password": "brand-new-pass",
        }, headers=auth_headers(supplier))
        assert response.status_code == 200
        assert verify_password("brand-new-pass", supplier.password_hash)

    def test_wrong_current_password(self, client, supplier):
        response = client.put("/api/auth/change-password", json={
            "current_password": "not-my-password",
            "new_password": "brand-new-pass",
        }, headers=auth_headers(supplier))
        assert response.status_code == 422
        assert response.json()["error"] == "ValidationError"
        assert verify_password(TEST_PASSWORD, supplier.password_hash)

    def test_requires_login(self, client):
        response = client.put("/api/auth/change-password", json={
            "current_password": TEST_PASSWORD,
            "new_password": "brand-new-pass",
        })
        assert response.status_code == 401

    def test_change_retires_reset_tokens(self, client, db_session, supplier):
        _, plain = create_reset_token(db_session, supplier.id)
        db_session.commit()

        client.put("/api/auth/change-password", json={
            "current_password": TEST_PASSWORD,
            "new_password": "brand-new-pass",
        }, headers=auth_headers(supplier))

        assert use_reset_token(db_session, plain, "sneaky-pass") is None


class TestAdminPasswordTools:

    def test_admin_resets_password(self, client, admin_user, supplier):
        response = client.post(
            f"/api/users/{supplier.id}/reset-password",
            json={"password": "set-by-admin"},
            headers=auth_headers(admin_user),
        )
        assert response.status_code == 200
        assert verify_password("set-by-admin", supplier.password_hash)

    def test_supplier_cannot_reset_others(self, client, supplier, other_supplier):
        response = client.post(
            f"/api/users/{other_supplier.id}/reset-password",
            json={"password": "set-by-peer"},
            headers=auth_headers(supplier),
        )
        assert response.status_code == 403

    def test_unknown_user(self, client, admin_user):
        response = client.post(
            "/api/users/00000000-0000-0000-0000-000000000000/reset-password",
            json={"password": "set-by-admin"},
            headers=auth_headers(admin_user),
        )
        assert response.status_code == 404


@pytest.mark.parametrize("field", ["current_password", "new_password"])
def test_change_password_fields_required(client, supplier, field):
    body = {"current_password": TEST_PASSWORD, "new_password": "brand-new-pass"}
    del body[field]

    response = client.put("/api/auth/change-password", json=body, headers=auth_headers(supplier))
    assert response.status_code == 422
