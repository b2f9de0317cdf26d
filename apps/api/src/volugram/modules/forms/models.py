"""
Form Models

A form is a shareable link (its opaque token) through which anonymous
volunteers submit hours to the reviewer who owns it.
"""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from volugram.core.languages import DEFAULT_LANGUAGE
from volugram.modules.shared import BaseModel

if TYPE_CHECKING:
    from volugram.modules.submissions.models import Submission
    from volugram.modules.users.models import User


class Form(BaseModel):
    """Published volunteer-hour form owned by one reviewer."""

    __tablename__ = "forms"

    # ON DELETE CASCADE: a deleted account takes its forms with it
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    definition: Mapped[dict] = mapped_column(JSON, nullable=False)
    # Base64 image or data URL, drawn at the top-right of the certificate
    certificate_logo: Mapped[str | None] = mapped_column(Text, nullable=True)
    language: Mapped[str] = mapped_column(
        String(2),
        nullable=False,
        default=DEFAULT_LANGUAGE.value,
    )

    owner: Mapped["User"] = relationship("User", back_populates="forms", lazy="noload")
    submissions: Mapped[list["Submission"]] = relationship(
        "Submission",
        back_populates="form",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<Form(id={self.id}, token={self.token}, user_id={self.user_id})>"
