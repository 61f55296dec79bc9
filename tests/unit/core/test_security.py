"""Tests for password hashing and access tokens."""

from datetime import timedelta
from uuid import uuid4

from jose import jwt

from onboarding.core.config import get_settings
from onboarding.core.security import (
    create_access_token,
    decode_token,
    get_password_hash,
    verify_password,
)


class TestPasswords:

    def test_hash_and_verify(self):
        hashed = get_password_hash("s3cret-pass")

        assert hashed != "s3cret-pass"
        assert hashed.startswith("$2b$")
        assert verify_password("s3cret-pass", hashed)
        assert not verify_password("wrong-pass", hashed)


class TestTokens:

    def test_round_trip(self):
        user_id = uuid4()
        token = create_access_token(user_id, "procurement")
        assert decode_token(token) == user_id

    def test_payload_contains_role(self):
        settings = get_settings()
        token = create_access_token(uuid4(), "legal")
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])

        assert payload["role"] == "legal"
        assert payload["type"] == "access"

    def test_expired_token(self):
        token = create_access_token(uuid4(), "supplier", expires_delta=timedelta(minutes=-1))
        assert decode_token(token) is None

    def test_garbage_token(self):
        assert decode_token("not-a-token") is None

    def test_wrong_signature(self):
        token = jwt.encode({"sub": str(uuid4()), "type": "access"}, "another-key", algorithm="HS256")
        assert decode_token(token) is None

    def test_non_access_token(self):
        settings = get_settings()
        token = jwt.encode(
            {"sub": str(uuid4()), "type": "refresh"}, settings.secret_key, algorithm=settings.algorithm
        )
        assert decode_token(token) is None

    def test_subject_must_be_uuid(self):
        settings = get_settings()
        token = jwt.encode({"sub": "42", "type": "access"}, settings.secret_key, algorithm=settings.algorithm)
        assert decode_token(token) is None
