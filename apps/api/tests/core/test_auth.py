"""
Tests for access token to reviewer resolution.
"""

from datetime import timedelta

import pytest
from fastapi import HTTPException

from volugram.core.auth import reviewer_from_token
from volugram.core.security import create_access_token


class TestReviewerFromToken:
    def test_valid_token(self):
        token = create_access_token(
            subject="7", additional_claims={"email": "leader@example.org", "name": "Lea"}
        )

        reviewer = reviewer_from_token(token)

        assert reviewer.id == 7
        assert reviewer.email == "leader@example.org"
        assert reviewer.name == "Lea"

    def test_garbage_token(self):
        with pytest.raises(HTTPException) as exc_info:
            reviewer_from_token("not-a-jwt")

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["error"] == "INVALID_TOKEN"

    def test_expired_token(self):
        token = create_access_token(subject="7", expires_delta=timedelta(seconds=-1))

        with pytest.raises(HTTPException) as exc_info:
            reviewer_from_token(token)

        assert exc_info.value.detail["error"] == "INVALID_TOKEN"

    def test_wrong_token_type(self):
        token = create_access_token(subject="7", additional_claims={"type": "refresh"})

        with pytest.raises(HTTPException) as exc_info:
            reviewer_from_token(token)

        assert exc_info.value.detail["error"] == "INVALID_TOKEN_TYPE"

    def test_non_numeric_subject(self):
        token = create_access_token(subject="abc")

        with pytest.raises(HTTPException) as exc_info:
            reviewer_from_token(token)

        assert exc_info.value.detail["error"] == "INVALID_TOKEN_CLAIMS"
