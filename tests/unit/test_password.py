"""Unit tests for password hashing and access tokens."""

import uuid
from datetime import timedelta

from featherlearn.kernel.identity.jwt import JWTManager
from featherlearn.kernel.identity.password import (
    PasswordHasher,
    hash_password,
    verify_password,
)


class TestPasswordHasher:
    """Tests for PasswordHasher."""

    def test_hash_creates_different_hashes(self):
        """Same password should create different hashes (due to salt)."""
        password = "TestPassword123"
        hash1 = PasswordHasher.hash(password)
        hash2 = PasswordHasher.hash(password)

        assert hash1 != hash2
        assert hash1.startswith("$2b$")  # bcrypt prefix

    def test_verify_correct_password(self):
        hashed = PasswordHasher.hash("TestPassword123")
        assert PasswordHasher.verify("TestPassword123", hashed) is True

    def test_verify_wrong_password(self):
        hashed = PasswordHasher.hash("TestPassword123")
        assert PasswordHasher.verify("WrongPassword", hashed) is False

    def test_malformed_hash_never_matches(self):
        assert PasswordHasher.verify("TestPassword123", "not-a-bcrypt-hash") is False

    def test_rounds_override(self):
        assert PasswordHasher.hash("TestPassword123", rounds=5).startswith("$2b$05$")

    def test_convenience_functions(self):
        hashed = hash_password("TestPassword123")
        assert verify_password("TestPassword123", hashed) is True
        assert verify_password("Other", hashed) is False


class TestJWTManager:

    def test_issue_and_verify(self):
        manager = JWTManager(secret_key="unit-test-secret", algorithm="HS256", access_token_expire_minutes=5)
        user_id = uuid.uuid4()
        token = manager.issue(user_id, "learner@example.com", "user")

        payload = manager.verify_access_token(token.access_token)
        assert payload is not None
        assert payload.sub == str(user_id)
        assert payload.role == "user"
        assert token.token_type == "bearer"
        assert 0 < token.expires_in <= 300

    def test_wrong_secret_rejected(self):
        token = JWTManager(secret_key="one").issue(uuid.uuid4(), "a@example.com", "user")
        assert JWTManager(secret_key="two").verify_access_token(token.access_token) is None

    def test_expired_token_rejected(self):
        manager = JWTManager(secret_key="unit-test-secret")
        token = manager.issue(uuid.uuid4(), "a@example.com", "user", lifetime=timedelta(seconds=-10))
        assert manager.verify_access_token(token.access_token) is None

    def test_garbage_rejected(self):
        assert JWTManager(secret_key="unit-test-secret").verify_access_token("not.a.token") is None
