"""
Forms Repository

Database operations for forms.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Form


async def create(
    db: AsyncSession,
    *,
    user_id: int,
    token: str,
    definition: dict,
    certificate_logo: str | None,
    language: str,
) -> Form:
    """Create a new form."""
    form = Form(
        user_id=user_id,
        token=token,
        definition=definition,
        certificate_logo=certificate_logo,
        language=language,
    )

    db.add(form)
    await db.commit()
    await db.refresh(form)

    return form


async def get_by_token(db: AsyncSession, token: str) -> Form | None:
    """Get form by its public token."""
    result = await db.execute(select(Form).where(Form.token == token))
    return result.scalar_one_or_none()


async def get_by_owner(db: AsyncSession, user_id: int) -> list[Form]:
    """Get every form owned by a user, oldest first."""
    result = await db.execute(select(Form).where(Form.user_id == user_id).order_by(Form.id))
    return list(result.scalars().all())


async def delete_owned(db: AsyncSession, token: str, user_id: int) -> bool:
    """
    Delete a form only if it belongs to the user.

    Returns:
        True if a form was deleted
    """
    result = await db.execute(delete(Form).where(Form.token == token, Form.user_id == user_id))
    await db.commit()
    return result.rowcount > 0
