"""
Submissions Schemas

Pydantic schemas for request validation and response serialization.
Field names follow the JSON the volunteer and reviewer front ends send.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from volugram.modules.submissions.models import SubmissionStatus


class SubmissionCreate(BaseModel):
    """Request body for POST /submissions (anonymous)."""

    email: str | None = None
    full_name: str | None = None
    form_token: str | None = Field(None, alias="token")
    # JSON object or JSON text; checked for the certificate fields on submit
    payload: dict[str, Any] | str | None = Field(None, alias="submission_json")
    captcha_token: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class SubmissionCreateResponse(BaseModel):
    """Response for POST /submissions."""

    id: int
    status: SubmissionStatus
    message: str = "Submission sent successfully"


class ReviewCategoryIn(BaseModel):
    """One reviewer rating."""

    name: str = Field(..., min_length=1, max_length=200)
    rating: float = Field(..., allow_inf_nan=False)
    comments: str | None = None


class ConfirmRequest(BaseModel):
    """Request body for POST /review/submissions/{id}/confirm."""

    language: str
    comment: str | None = ""
    # Display name printed in the email subject; defaults to the reviewer's name
    who: str | None = Field(None, max_length=200)
    team_leader_review: list[ReviewCategoryIn] = Field(..., alias="teamLeaderReview")

    model_config = ConfigDict(populate_by_name=True)


class RejectRequest(BaseModel):
    """Request body for POST /review/submissions/{id}/reject."""

    language: str
    comment: str = Field(..., min_length=1)
    who: str | None = Field(None, max_length=200)


class DecisionResponse(BaseModel):
    """Response for confirm and reject."""

    id: int
    status: SubmissionStatus
    message: str


class PendingSubmissionItem(BaseModel):
    """A pending submission in the reviewer's queue."""

    id: int
    email: str
    full_name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PendingSubmissionListResponse(BaseModel):
    """Response for GET /review/submissions."""

    items: list[PendingSubmissionItem]
    total: int


class SubmissionDetailResponse(BaseModel):
    """Response for GET /review/submissions/{id}."""

    id: int
    email: str
    full_name: str
    payload: dict[str, Any]
    status: SubmissionStatus
    confirmed_by: str | None = None
    comment: str | None = None
    has_certificate: bool
    created_at: datetime


class CertificatesRequest(BaseModel):
    """Request body for POST /submissions/certificates."""

    email: EmailStr


class MessageResponse(BaseModel):
    message: str
