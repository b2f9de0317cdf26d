"""
Review Router

Endpoints for reviewers deciding on submissions to their forms:
- GET /review/submissions - Pending submissions queue
- GET /review/submissions/{id} - Submission detail
- POST /review/submissions/{id}/confirm - Confirm and issue the certificate
- POST /review/submissions/{id}/reject - Reject (deletes the submission)

All endpoints require a reviewer access token. Decisions answer 409
ALREADY_CONFIRMED when the submission is no longer pending.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from volugram.core.auth import Reviewer, get_current_reviewer
from volugram.core.database import get_db
from volugram.core.errors import RenderError, VolugramError, internal_error
from volugram.modules.submissions import service
from volugram.modules.submissions.models import SubmissionStatus
from volugram.modules.submissions.schemas import (
    ConfirmRequest,
    DecisionResponse,
    PendingSubmissionItem,
    PendingSubmissionListResponse,
    RejectRequest,
    SubmissionDetailResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=PendingSubmissionListResponse, summary="List Pending Submissions")
async def list_pending(
    reviewer: Reviewer = Depends(get_current_reviewer),
    db: AsyncSession = Depends(get_db),
) -> PendingSubmissionListResponse:
    """Pending submissions of every form the reviewer owns."""
    submissions = await service.list_pending(db, reviewer)
    return PendingSubmissionListResponse(
        items=[PendingSubmissionItem.model_validate(s) for s in submissions],
        total=len(submissions),
    )


@router.get("/{submission_id}", response_model=SubmissionDetailResponse, summary="Get Submission")
async def get_submission(
    submission_id: int,
    reviewer: Reviewer = Depends(get_current_reviewer),
    db: AsyncSession = Depends(get_db),
) -> SubmissionDetailResponse:
    """
    Full submission including the volunteer's answers.

    Raises:
        HTTPException 404: Not found or not the reviewer's
    """
    try:
        submission = await service.get_submission(db, submission_id, reviewer)
    except VolugramError as e:
        raise e.to_http_exception() from e

    return SubmissionDetailResponse(
        id=submission.id,
        email=submission.email,
        full_name=submission.full_name,
        payload=submission.payload,
        status=submission.status,
        confirmed_by=submission.confirmed_by,
        comment=submission.comment,
        has_certificate=submission.certificate_pdf is not None,
        created_at=submission.created_at,
    )


@router.post(
    "/{submission_id}/confirm",
    response_model=DecisionResponse,
    summary="Confirm Submission",
)
async def confirm_submission(
    submission_id: int,
    data: ConfirmRequest,
    reviewer: Reviewer = Depends(get_current_reviewer),
    db: AsyncSession = Depends(get_db),
) -> DecisionResponse:
    """
    Confirm a pending submission, render its certificate and email it.

    Raises:
        HTTPException 400: Unsupported language or missing ratings
        HTTPException 403: Not the reviewer's submission
        HTTPException 404: Submission not found
        HTTPException 409: Already decided
        HTTPException 500: Certificate rendering failed (submission stays pending)
    """
    try:
        submission = await service.confirm(
            db,
            submission_id,
            reviewer,
            language=data.language,
            comment=data.comment,
            reviewer_categories=[c.model_dump() for c in data.team_leader_review],
            confirmed_by=data.who,
        )
        return DecisionResponse(
            id=submission.id,
            status=submission.status,
            message="Submission confirmed successfully",
        )
    except RenderError as e:
        logger.error(f"Certificate rendering failed for submission {submission_id}: {e.message}")
        raise e.to_http_exception() from e
    except VolugramError as e:
        logger.warning(f"Confirm of submission {submission_id} refused: {e.error_code}")
        raise e.to_http_exception() from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Unexpected error confirming submission {submission_id}: {e}")
        raise internal_error() from e


@router.post(
    "/{submission_id}/reject",
    response_model=DecisionResponse,
    summary="Reject Submission",
)
async def reject_submission(
    submission_id: int,
    data: RejectRequest,
    reviewer: Reviewer = Depends(get_current_reviewer),
    db: AsyncSession = Depends(get_db),
) -> DecisionResponse:
    """
    Reject a pending submission. The submission is deleted and the
    volunteer is notified.

    Raises:
        HTTPException 400: Unsupported language or missing comment
        HTTPException 403: Not the reviewer's submission
        HTTPException 404: Submission not found
        HTTPException 409: Already decided
    """
    try:
        await service.reject(
            db,
            submission_id,
            reviewer,
            comment=data.comment,
            language=data.language,
            rejected_by=data.who,
        )
        return DecisionResponse(
            id=submission_id,
            status=SubmissionStatus.REJECTED,
            message="Submission rejected and deleted successfully",
        )
    except VolugramError as e:
        logger.warning(f"Reject of submission {submission_id} refused: {e.error_code}")
        raise e.to_http_exception() from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Unexpected error rejecting submission {submission_id}: {e}")
        raise internal_error() from e
