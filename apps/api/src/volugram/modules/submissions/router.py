"""
Submissions Router (public)

Endpoints used by anonymous volunteers:
- POST /submissions - Submit a filled-in form
- POST /submissions/certificates - Email all of my certificates as a zip

Security:
- Both endpoints are rate limited per client IP (Redis, memory fallback)
- Submissions require a valid hCaptcha token
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from volugram.core.database import get_db
from volugram.core.errors import VolugramError, internal_error
from volugram.core.rate_limit import (
    RATE_LIMIT_CERTIFICATES,
    RATE_LIMIT_SUBMIT,
    client_ip,
    limit_by_ip,
)
from volugram.modules.submissions import service
from volugram.modules.submissions.schemas import (
    CertificatesRequest,
    MessageResponse,
    SubmissionCreate,
    SubmissionCreateResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=SubmissionCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Volunteer Hours",
    dependencies=[Depends(limit_by_ip("submit", *RATE_LIMIT_SUBMIT))],
)
async def submit(
    data: SubmissionCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> SubmissionCreateResponse:
    """
    Submit a filled-in form. Public, captcha protected.

    Raises:
        HTTPException 400: Missing fields or failed captcha
        HTTPException 404: Form does not exist
        HTTPException 429: Rate limit exceeded
    """
    try:
        submission = await service.submit(
            db,
            email=data.email,
            full_name=data.full_name,
            form_token=data.form_token,
            payload=data.payload,
            captcha_token=data.captcha_token,
            remote_ip=client_ip(request),
        )
        return SubmissionCreateResponse(id=submission.id, status=submission.status)
    except VolugramError as e:
        logger.warning(f"Submission rejected: {e.message}")
        raise e.to_http_exception() from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Unexpected error creating submission: {e}")
        raise internal_error() from e


@router.post(
    "/certificates",
    response_model=MessageResponse,
    summary="Email My Certificates",
    dependencies=[Depends(limit_by_ip("certificates", *RATE_LIMIT_CERTIFICATES))],
)
async def send_certificates(
    data: CertificatesRequest,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """
    Email every confirmed certificate for an address as certificates.zip.

    Raises:
        HTTPException 404: No certificates for this address
        HTTPException 429: Rate limit exceeded
    """
    try:
        await service.send_certificates(db, data.email)
        return MessageResponse(message="Certificates sent via email.")
    except VolugramError as e:
        raise e.to_http_exception() from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Unexpected error sending certificates: {e}")
        raise internal_error() from e
