"""
Submissions Service

Business logic for the submission review workflow:

    Pending --confirm--> Confirmed   (certificate rendered, stored and mailed)
    Pending --reject---> Rejected    (row deleted, rejection mailed)

Order of work for a decision:
1. Language and input validation, ownership check, pending guard
2. Certificate rendering (confirm only); a failure leaves the submission
   pending
3. One conditional UPDATE or DELETE restricted to pending rows; if it
   matches nothing another decision won and AlreadyConfirmedError is raised
4. Notification email; a delivery failure is logged, not raised
"""

import asyncio
import io
import json
import logging
import uuid
import zipfile
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from volugram.core.auth import Reviewer
from volugram.core.captcha import verify_captcha
from volugram.core.email import (
    send_certificates_archive,
    send_submission_accepted,
    send_submission_rejected,
)
from volugram.core.errors import (
    AlreadyConfirmedError,
    CaptchaVerificationError,
    FormNotFoundError,
    NotFoundError,
    RenderError,
    SubmissionNotFoundError,
    UnauthorizedError,
    ValidationError,
)
from volugram.core.languages import resolve_language
from volugram.modules.certificates.renderer import parse_submission_payload, render_certificate
from volugram.modules.forms import repository as forms_repository
from volugram.modules.forms.models import Form
from volugram.modules.submissions import repository
from volugram.modules.submissions.models import (
    Submission,
    SubmissionStatus,
    can_transition,
)

logger = logging.getLogger(__name__)


def _parse_payload(payload: Mapping[str, Any] | str) -> dict[str, Any]:
    if isinstance(payload, Mapping):
        return dict(payload)
    try:
        parsed = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ValidationError("Submission data is not valid JSON") from e
    if not isinstance(parsed, dict):
        raise ValidationError("Submission data must be a JSON object")
    return parsed


def _check_certificate_fields(full_name: str, data: dict[str, Any]) -> None:
    # Same checks the renderer applies at confirm time
    try:
        parse_submission_payload(full_name, data)
    except RenderError as e:
        raise ValidationError(
            f"Invalid submission data: {e.reason}", error_code="INVALID_SUBMISSION_DATA"
        ) from e


async def submit(
    db: AsyncSession,
    email: str | None,
    full_name: str | None,
    form_token: str | None,
    payload: Mapping[str, Any] | str | None,
    captcha_token: str | None,
    remote_ip: str | None = None,
) -> Submission:
    """
    Create a pending submission from an anonymous volunteer.

    Args:
        db: Database session
        email: Volunteer's email (certificates are sent here)
        full_name: Volunteer's name as printed on the certificate
        form_token: Token of the form being filled in
        payload: Answers including the volunteerReview self-evaluation
        captcha_token: hCaptcha response token
        remote_ip: Client address forwarded to the captcha check

    Returns:
        The created submission

    Raises:
        ValidationError: If a required field is missing or the payload lacks
            the certificate fields (narrative, dates, volunteerReview)
        CaptchaVerificationError: If the captcha check fails
        FormNotFoundError: If no form has the given token
    """
    if not email or not full_name or not form_token or not payload:
        raise ValidationError()

    data = _parse_payload(payload)
    _check_certificate_fields(full_name, data)

    if not await verify_captcha(captcha_token or "", remote_ip):
        logger.info("Submission rejected: captcha failed")
        raise CaptchaVerificationError()

    form = await forms_repository.get_by_token(db, form_token)
    if form is None:
        raise FormNotFoundError()

    submission = await repository.create(
        db,
        form_id=form.id,
        email=email,
        full_name=full_name,
        payload=data,
    )

    logger.info(f"Submission created: id={submission.id}, form={form.id}")
    return submission


async def _get_owned_submission(
    db: AsyncSession,
    submission_id: int,
    reviewer: Reviewer,
) -> tuple[Submission, Form]:
    found = await repository.get_with_form(db, submission_id)
    if found is None:
        raise SubmissionNotFoundError(submission_id)

    submission, form = found
    if form.user_id != reviewer.id:
        logger.warning(
            f"Reviewer {reviewer.id} denied access to submission {submission_id} "
            f"owned by user {form.user_id}"
        )
        raise UnauthorizedError()

    return submission, form


def _ensure_pending(submission: Submission, target: SubmissionStatus) -> None:
    if not can_transition(submission.status, target):
        raise AlreadyConfirmedError(submission.id)


def _certificate_payload(submission: Submission, form: Form) -> dict[str, Any]:
    payload = dict(submission.payload)
    if form.certificate_logo and not payload.get("certificateLogo"):
        payload["certificateLogo"] = form.certificate_logo
    return payload


async def confirm(
    db: AsyncSession,
    submission_id: int,
    reviewer: Reviewer,
    language: str,
    comment: str | None,
    reviewer_categories: Sequence[Mapping[str, Any]],
    confirmed_by: str | None = None,
) -> Submission:
    """
    Confirm a pending submission and issue its certificate.

    Args:
        db: Database session
        submission_id: Submission to confirm
        reviewer: Acting reviewer (must own the submission's form)
        language: Certificate and email language
        comment: Comment included in the email
        reviewer_categories: Reviewer's rated categories
        confirmed_by: Name shown as the confirmer (defaults to the reviewer's name)

    Returns:
        The confirmed submission

    Raises:
        UnsupportedLocaleError: If the language is not supported
        ValidationError: If reviewer_categories is empty
        SubmissionNotFoundError: If the submission does not exist
        UnauthorizedError: If the reviewer does not own the form
        AlreadyConfirmedError: If the submission is no longer pending
        RenderError: If the certificate cannot be generated
    """
    lang = resolve_language(language)
    if not reviewer_categories:
        raise ValidationError("Reviewer ratings are required")

    submission, form = await _get_owned_submission(db, submission_id, reviewer)
    _ensure_pending(submission, SubmissionStatus.CONFIRMED)

    who = confirmed_by or reviewer.name

    # Runs before any write so a RenderError leaves the submission pending
    certificate_pdf = await asyncio.to_thread(
        render_certificate,
        submission.full_name,
        _certificate_payload(submission, form),
        lang,
        list(reviewer_categories),
    )

    won = await repository.confirm_if_pending(
        db,
        submission_id,
        confirmed_by=who,
        comment=comment,
        certificate_pdf=certificate_pdf,
    )
    if not won:
        logger.info(f"Confirm of submission {submission_id} lost to a concurrent decision")
        raise AlreadyConfirmedError(submission_id)

    submission.status = SubmissionStatus.CONFIRMED
    submission.confirmed_by = who
    submission.comment = comment
    submission.certificate_pdf = certificate_pdf

    logger.info(f"Submission {submission_id} confirmed by reviewer {reviewer.id}")

    sent = await send_submission_accepted(
        to_email=submission.email,
        language=lang,
        who=who,
        comment=comment or "",
        certificate_pdf=certificate_pdf,
    )
    if not sent:
        logger.error(f"Acceptance email for submission {submission_id} was not delivered")

    return submission


async def reject(
    db: AsyncSession,
    submission_id: int,
    reviewer: Reviewer,
    comment: str,
    language: str,
    rejected_by: str | None = None,
) -> None:
    """
    Reject a pending submission; the row is deleted.

    Args:
        db: Database session
        submission_id: Submission to reject
        reviewer: Acting reviewer (must own the submission's form)
        comment: Reason included in the email
        language: Email language
        rejected_by: Name shown as the rejecter (defaults to the reviewer's name)

    Raises:
        UnsupportedLocaleError: If the language is not supported
        ValidationError: If the comment is empty
        SubmissionNotFoundError: If the submission does not exist
        UnauthorizedError: If the reviewer does not own the form
        AlreadyConfirmedError: If the submission is no longer pending
    """
    lang = resolve_language(language)
    if not comment:
        raise ValidationError()

    submission, _ = await _get_owned_submission(db, submission_id, reviewer)
    _ensure_pending(submission, SubmissionStatus.REJECTED)

    volunteer_email = submission.email
    who = rejected_by or reviewer.name

    won = await repository.delete_if_pending(db, submission_id)
    if not won:
        logger.info(f"Reject of submission {submission_id} lost to a concurrent decision")
        raise AlreadyConfirmedError(submission_id)

    logger.info(f"Submission {submission_id} rejected by reviewer {reviewer.id}")

    sent = await send_submission_rejected(
        to_email=volunteer_email,
        language=lang,
        who=who,
        comment=comment,
    )
    if not sent:
        logger.error(f"Rejection email for submission {submission_id} was not delivered")


async def list_pending(db: AsyncSession, reviewer: Reviewer) -> list[Submission]:
    """Pending submissions of the reviewer's forms, in store order."""
    return await repository.get_pending_for_owner(db, reviewer.id)


async def get_submission(db: AsyncSession, submission_id: int, reviewer: Reviewer) -> Submission:
    """
    Full submission for the owner of its form.

    Raises:
        SubmissionNotFoundError: If it does not exist or belongs to another reviewer
    """
    found = await repository.get_with_form(db, submission_id)
    if found is None or found[1].user_id != reviewer.id:
        raise SubmissionNotFoundError(submission_id)
    return found[0]


def build_certificates_archive(certificates: Sequence[tuple[int, bytes]]) -> bytes:
    """Zip certificates as certificate_<id>.pdf entries."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as archive:
        for submission_id, pdf in certificates:
            archive.writestr(f"certificate_{submission_id}.pdf", pdf)
    return buffer.getvalue()


async def send_certificates(db: AsyncSession, email: str) -> int:
    """
    Email every confirmed certificate of an address as one zip archive.

    Returns:
        Number of certificates sent

    Raises:
        NotFoundError: If the address has no confirmed certificates
    """
    certificates = await repository.get_confirmed_certificates(db, email)
    if not certificates:
        raise NotFoundError("No certificates found for the user.", "CERTIFICATES_NOT_FOUND")

    archive = build_certificates_archive(certificates)
    archive_id = uuid.uuid4().hex[:8]

    sent = await send_certificates_archive(email, archive_id, archive)
    if not sent:
        logger.error(f"Certificates archive {archive_id} was not delivered")

    logger.info(f"Sent {len(certificates)} certificate(s) in archive {archive_id}")
    return len(certificates)
