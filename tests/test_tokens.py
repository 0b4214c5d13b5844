"""
Tests for token signing and password hashing.
"""

import pytest

from auth.jwt import InvalidTokenError, create_token, verify_token
from auth.password import hash_password, verify_password


class TestTokens:
    def test_verify_returns_user_id(self):
        token = create_token("user-1")
        assert verify_token(token) == "user-1"

    def test_other_secret_rejected(self):
        token = create_token("user-1", secret="a")
        with pytest.raises(InvalidTokenError, match="signature"):
            verify_token(token, secret="b")

    def test_expired(self):
        token = create_token("user-1", expires_in=-1)
        with pytest.raises(InvalidTokenError, match="expired"):
            verify_token(token)

    @pytest.mark.parametrize("token", ["", "no-dot", "!!!.abc"])
    def test_malformed(self, token):
        with pytest.raises(InvalidTokenError):
            verify_token(token)


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("s3cret")
        assert hashed != "s3cret"
        assert verify_password("s3cret", hashed)
        assert not verify_password("wrong", hashed)

    def test_missing_hash_never_matches(self):
        assert not verify_password("anything", None)

    def test_garbage_hash(self):
        assert not verify_password("anything", "not-a-bcrypt-hash")
