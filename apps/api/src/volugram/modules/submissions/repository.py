"""
Submissions Repository

Database operations for submissions.

Decisions are written with conditional statements: confirm is an UPDATE and
reject a DELETE, both restricted to rows still in the pending status. The
row count tells the caller whether it won; a concurrent decision on the
same submission makes the loser match zero rows.
"""

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from volugram.modules.forms.models import Form

from .models import Submission, SubmissionStatus


async def create(
    db: AsyncSession,
    *,
    form_id: int,
    email: str,
    full_name: str,
    payload: dict,
) -> Submission:
    """Create a new pending submission."""
    submission = Submission(
        form_id=form_id,
        email=email,
        full_name=full_name,
        payload=payload,
        status=SubmissionStatus.PENDING,
    )

    db.add(submission)
    await db.commit()
    await db.refresh(submission)

    return submission


async def get_with_form(db: AsyncSession, id: int) -> tuple[Submission, Form] | None:
    """Get a submission together with the form it targets."""
    result = await db.execute(
        select(Submission, Form)
        .join(Form, Submission.form_id == Form.id)
        .where(Submission.id == id)
    )
    row = result.first()
    if row is None:
        return None
    return row[0], row[1]


async def get_pending_for_owner(db: AsyncSession, user_id: int) -> list[Submission]:
    """Pending submissions of every form owned by the user."""
    result = await db.execute(
        select(Submission)
        .join(Form, Submission.form_id == Form.id)
        .where(
            Form.user_id == user_id,
            Submission.status == SubmissionStatus.PENDING,
        )
    )
    return list(result.scalars().all())


async def confirm_if_pending(
    db: AsyncSession,
    id: int,
    *,
    confirmed_by: str,
    comment: str | None,
    certificate_pdf: bytes,
) -> bool:
    """
    Mark a pending submission confirmed and store its certificate.

    Returns:
        True if this call performed the transition, False if the submission
        was no longer pending (or no longer exists)
    """
    result = await db.execute(
        update(Submission)
        .where(
            Submission.id == id,
            Submission.status == SubmissionStatus.PENDING,
        )
        .values(
            status=SubmissionStatus.CONFIRMED,
            confirmed_by=confirmed_by,
            comment=comment,
            certificate_pdf=certificate_pdf,
        )
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount == 1


async def delete_if_pending(db: AsyncSession, id: int) -> bool:
    """
    Delete a pending submission (a rejection).

    Returns:
        True if this call deleted the row, False if it was no longer pending
    """
    result = await db.execute(
        delete(Submission)
        .where(
            Submission.id == id,
            Submission.status == SubmissionStatus.PENDING,
        )
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount == 1


async def get_confirmed_certificates(db: AsyncSession, email: str) -> list[tuple[int, bytes]]:
    """(submission id, certificate PDF) for every confirmed submission of an email."""
    result = await db.execute(
        select(Submission.id, Submission.certificate_pdf)
        .where(
            Submission.email == email,
            Submission.status == SubmissionStatus.CONFIRMED,
            Submission.certificate_pdf.is_not(None),
        )
        .order_by(Submission.id)
    )
    return [(row[0], row[1]) for row in result.all()]
