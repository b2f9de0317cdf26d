"""initial volunteer schema

Revision ID: 0001_initial_volunteer_schema
Revises:
Create Date: 2026-10-18 12:00:00.000000

This migration creates:
1. users - reviewer accounts
2. forms - shareable forms owned by a reviewer
3. submissions - volunteer submissions with their decision state

Rejected submissions are deleted, so submission_status only ever holds
pending or confirmed in practice; the rejected value exists for the
transition table.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_initial_volunteer_schema"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create users, forms and submissions."""
    submission_status_enum = postgresql.ENUM(
        "pending",
        "confirmed",
        "rejected",
        name="submission_status",
        create_type=False,
    )
    submission_status_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        *_timestamps(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "forms",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        *_timestamps(),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("token", sa.String(length=64), nullable=False),
        sa.Column("definition", postgresql.JSON(), nullable=False),
        sa.Column("certificate_logo", sa.Text(), nullable=True),
        sa.Column("language", sa.String(length=2), nullable=False, server_default="en"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("language IN ('en', 'de', 'et', 'no')", name="ck_forms_language"),
    )
    op.create_index("ix_forms_user_id", "forms", ["user_id"])
    op.create_index("ix_forms_token", "forms", ["token"], unique=True)

    op.create_table(
        "submissions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        *_timestamps(),
        sa.Column("form_id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        sa.Column("payload", postgresql.JSON(), nullable=False),
        sa.Column(
            "status",
            submission_status_enum,
            nullable=False,
            server_default="pending",
        ),
        sa.Column("confirmed_by", sa.String(length=200), nullable=True),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("certificate_pdf", sa.LargeBinary(), nullable=True),
        sa.ForeignKeyConstraint(["form_id"], ["forms.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        # A certificate exists exactly when the submission is confirmed
        sa.CheckConstraint(
            "(status = 'confirmed') = (certificate_pdf IS NOT NULL)",
            name="ck_submissions_certificate_iff_confirmed",
        ),
    )
    op.create_index("ix_submissions_form_id_status", "submissions", ["form_id", "status"])
    op.create_index("ix_submissions_email_status", "submissions", ["email", "status"])


def downgrade() -> None:
    """Drop all tables and the status enum."""
    op.drop_index("ix_submissions_email_status", table_name="submissions")
    op.drop_index("ix_submissions_form_id_status", table_name="submissions")
    op.drop_table("submissions")

    op.drop_index("ix_forms_token", table_name="forms")
    op.drop_index("ix_forms_user_id", table_name="forms")
    op.drop_table("forms")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    postgresql.ENUM(name="submission_status").drop(op.get_bind(), checkfirst=True)
