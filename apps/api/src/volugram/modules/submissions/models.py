"""
Submission Models

A submission is one volunteer's filled-in form awaiting the owner's
decision. Confirmed submissions keep their rendered certificate; rejected
submissions are deleted rather than stored with a rejected status.
"""

import enum
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, Index, LargeBinary, String, Text
from sqlalchemy.dialects.postgresql import JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from volugram.modules.shared import BaseModel

if TYPE_CHECKING:
    from volugram.modules.forms.models import Form


class SubmissionStatus(str, enum.Enum):
    """Lifecycle of a submission."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    # Never stored: a rejection deletes the row
    REJECTED = "rejected"


# Terminal states have no outgoing transitions
VALID_STATUS_TRANSITIONS: dict[SubmissionStatus, set[SubmissionStatus]] = {
    SubmissionStatus.PENDING: {
        SubmissionStatus.CONFIRMED,
        SubmissionStatus.REJECTED,
    },
    SubmissionStatus.CONFIRMED: set(),
    SubmissionStatus.REJECTED: set(),
}


def can_transition(current: SubmissionStatus, new: SubmissionStatus) -> bool:
    return new in VALID_STATUS_TRANSITIONS.get(current, set())


class Submission(BaseModel):
    """Volunteer submission against a form."""

    __tablename__ = "submissions"

    form_id: Mapped[int] = mapped_column(
        ForeignKey("forms.id", ondelete="CASCADE"),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    # Answers plus the volunteerReview self-evaluation list
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)

    status: Mapped[SubmissionStatus] = mapped_column(
        Enum(
            SubmissionStatus,
            name="submission_status",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=SubmissionStatus.PENDING,
    )
    confirmed_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    certificate_pdf: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)

    form: Mapped["Form"] = relationship("Form", back_populates="submissions", lazy="noload")

    __table_args__ = (
        Index("ix_submissions_form_id_status", "form_id", "status"),
        Index("ix_submissions_email_status", "email", "status"),
    )

    def __repr__(self) -> str:
        return f"<Submission(id={self.id}, form_id={self.form_id}, status={self.status.value})>"
