"""Tests for admin password hashing and session tokens."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from journey_forward.admin.auth import (
    ALGORITHM,
    hash_password,
    issue_session_token,
    verify_password,
    verify_session_token,
)
from journey_forward.errors import AuthenticationError

SECRET = "unit-secret"


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("correct horse", rounds=4)
        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_malformed_hash(self):
        assert not verify_password("anything", "not-a-bcrypt-hash")
        assert not verify_password("anything", "")


class TestSessionTokens:
    def test_round_trip_claims(self):
        token = issue_session_token(1, "admin", SECRET, 3600)
        session = verify_session_token(token, SECRET)
        assert session.sub == "1"
        assert session.admin_id == 1
        assert session.username == "admin"
        assert session.exp - session.iat == 3600

    def test_expired(self):
        issued = datetime.now(timezone.utc) - timedelta(hours=2)
        token = issue_session_token(1, "admin", SECRET, 3600, now=issued)
        with pytest.raises(AuthenticationError, match="Session expired"):
            verify_session_token(token, SECRET)

    def test_wrong_secret(self):
        token = issue_session_token(1, "admin", SECRET, 3600)
        with pytest.raises(AuthenticationError, match="Unauthorized"):
            verify_session_token(token, "other-secret")

    def test_tampered(self):
        token = issue_session_token(1, "admin", SECRET, 3600)
        header, payload, signature = token.split(".")
        forged = jwt.encode({"sub": "2", "username": "x", "exp": 9999999999}, "guess", algorithm=ALGORITHM)
        with pytest.raises(AuthenticationError):
            verify_session_token(".".join([header, forged.split(".")[1], signature]), SECRET)

    def test_missing_token(self):
        with pytest.raises(AuthenticationError):
            verify_session_token("", SECRET)

    def test_missing_sub_claim(self):
        token = jwt.encode({"username": "x", "exp": 9999999999}, SECRET, algorithm=ALGORITHM)
        with pytest.raises(AuthenticationError, match="Unauthorized"):
            verify_session_token(token, SECRET)
