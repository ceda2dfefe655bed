"""
Tests for session token verification.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.core.config import get_settings
from app.core.errors import Unauthenticated
from app.core.identity import VerifiedIdentity, issue_token, verify_token


def _sign(payload: dict, key: str | None = None) -> str:
    settings = get_settings()
    return jwt.encode(payload, key or settings.secret_key, algorithm=settings.jwt_algorithm)


class TestVerifyToken:
    def test_round_trip(self):
        user_id = uuid.uuid4()
        identity = verify_token(issue_token(user_id))
        assert identity == VerifiedIdentity(user_id=user_id)

    def test_expired(self):
        token = issue_token(uuid.uuid4(), expires_delta=timedelta(seconds=-1))
        with pytest.raises(Unauthenticated):
            verify_token(token)

    def test_garbage(self):
        with pytest.raises(Unauthenticated):
            verify_token("not.a.token")

    def test_wrong_key(self):
        token = _sign({"sub": str(uuid.uuid4())}, key="some-other-secret-of-enough-length")
        with pytest.raises(Unauthenticated):
            verify_token(token)

    def test_missing_subject(self):
        exp = datetime.now(timezone.utc) + timedelta(minutes=5)
        with pytest.raises(Unauthenticated):
            verify_token(_sign({"exp": exp}))

    def test_subject_not_a_uuid(self):
        with pytest.raises(Unauthenticated):
            verify_token(_sign({"sub": "42"}))


def test_identity_is_immutable():
    identity = VerifiedIdentity(user_id=uuid.uuid4())
    with pytest.raises(AttributeError):
        identity.user_id = uuid.uuid4()
