"""
Forms Router

Endpoints:
- POST /forms - Publish a form (reviewer)
- GET /forms - List the reviewer's forms
- GET /forms/{token} - Public form definition for volunteers
- DELETE /forms/{token} - Delete one of the reviewer's forms
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from volugram.core.auth import Reviewer, get_current_reviewer
from volugram.core.database import get_db
from volugram.core.errors import VolugramError, internal_error
from volugram.modules.forms import service
from volugram.modules.forms.schemas import (
    FormCreate,
    FormCreateResponse,
    FormListResponse,
    FormSummary,
    PublicFormResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=FormCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Publish Form",
)
async def create_form(
    data: FormCreate,
    reviewer: Reviewer = Depends(get_current_reviewer),
    db: AsyncSession = Depends(get_db),
) -> FormCreateResponse:
    """
    Publish a new form owned by the authenticated reviewer.

    Raises:
        HTTPException 400: Empty definition or unsupported language
    """
    try:
        token = await service.create_form(
            db,
            reviewer,
            definition=data.definition,
            certificate_logo=data.certificate_logo,
            language=data.language,
        )
        return FormCreateResponse(token=token)
    except VolugramError as e:
        logger.warning(f"Form creation rejected: {e.message}")
        raise e.to_http_exception() from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Unexpected error creating form: {e}")
        raise internal_error() from e


@router.get("", response_model=FormListResponse, summary="List My Forms")
async def list_forms(
    reviewer: Reviewer = Depends(get_current_reviewer),
    db: AsyncSession = Depends(get_db),
) -> FormListResponse:
    """List every form the authenticated reviewer owns."""
    forms = await service.list_forms(db, reviewer)
    return FormListResponse(
        forms=[FormSummary.model_validate(form) for form in forms],
        total=len(forms),
    )


@router.get("/{token}", response_model=PublicFormResponse, summary="Get Public Form")
async def get_public_form(
    token: str,
    db: AsyncSession = Depends(get_db),
) -> PublicFormResponse:
    """
    Get the definition of a form by its token. Public.

    Raises:
        HTTPException 404: Form not found
    """
    try:
        form = await service.get_public_form(db, token)
    except VolugramError as e:
        raise e.to_http_exception() from e

    return PublicFormResponse(
        definition=form.definition,
        certificate_logo=form.certificate_logo,
        language=form.language,
    )


@router.delete(
    "/{token}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Form",
)
async def delete_form(
    token: str,
    reviewer: Reviewer = Depends(get_current_reviewer),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """
    Delete a form and its submissions.

    Raises:
        HTTPException 403: Form does not exist or is not the reviewer's
    """
    try:
        await service.delete_form(db, reviewer, token)
    except VolugramError as e:
        raise e.to_http_exception() from e

    return Response(status_code=status.HTTP_204_NO_CONTENT)
