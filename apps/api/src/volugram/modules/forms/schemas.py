"""
Forms Schemas

Pydantic schemas for request validation and response serialization.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FormCreate(BaseModel):
    """Request body for POST /forms."""

    definition: dict[str, Any] = Field(..., alias="formData")
    certificate_logo: str | None = Field(None, alias="certificateLogo")
    # Validated by the service so unknown codes answer UNSUPPORTED_LOCALE
    language: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class FormCreateResponse(BaseModel):
    """Response for POST /forms."""

    token: str


class PublicFormResponse(BaseModel):
    """What an anonymous volunteer needs to render the form."""

    definition: dict[str, Any]
    certificate_logo: str | None = None
    language: str


class FormSummary(BaseModel):
    """A form in the owner's list."""

    token: str
    definition: dict[str, Any]
    language: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FormListResponse(BaseModel):
    """Response for GET /forms."""

    forms: list[FormSummary]
    total: int
