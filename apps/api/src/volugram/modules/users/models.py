"""
User Models

Reviewer accounts. A user owns forms and decides on their submissions.
"""

from typing import TYPE_CHECKING

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from volugram.modules.shared import BaseModel

if TYPE_CHECKING:
    from volugram.modules.forms.models import Form


class User(BaseModel):
    """
    Reviewer account.

    Created only through email activation, so every row has a confirmed
    address.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)

    forms: Mapped[list["Form"]] = relationship(
        "Form",
        back_populates="owner",
        cascade="all, delete-orphan",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
