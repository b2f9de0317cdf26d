"""
Forms Service

Reviewers publish forms; each form gets an opaque token that anonymous
volunteers use to submit against it.
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from volugram.core.auth import Reviewer
from volugram.core.errors import FormNotFoundError, UnauthorizedError, ValidationError
from volugram.core.languages import DEFAULT_LANGUAGE, resolve_language
from volugram.modules.forms import repository
from volugram.modules.forms.models import Form

logger = logging.getLogger(__name__)


def _generate_form_token() -> str:
    return str(uuid.uuid4())


async def create_form(
    db: AsyncSession,
    owner: Reviewer,
    definition: dict,
    certificate_logo: str | None = None,
    language: str | None = None,
) -> str:
    """
    Publish a new form.

    Args:
        db: Database session
        owner: The reviewer creating the form
        definition: Form field definition
        certificate_logo: Optional base64 image for the certificate
        language: Certificate and email language; defaults to en when omitted

    Returns:
        The new form's token

    Raises:
        ValidationError: If the definition is empty
        UnsupportedLocaleError: If the language is not supported
    """
    if not definition:
        raise ValidationError("Invalid form data")

    lang = DEFAULT_LANGUAGE if language is None else resolve_language(language)

    form = await repository.create(
        db,
        user_id=owner.id,
        token=_generate_form_token(),
        definition=definition,
        certificate_logo=certificate_logo or None,
        language=lang.value,
    )

    logger.info(f"Form created: id={form.id}, owner={owner.id}, language={lang.value}")
    return form.token


async def get_public_form(db: AsyncSession, token: str) -> Form:
    """
    Fetch a form by token for anonymous volunteers.

    Raises:
        FormNotFoundError: If no form has this token
    """
    form = await repository.get_by_token(db, token)
    if form is None:
        raise FormNotFoundError()
    return form


async def list_forms(db: AsyncSession, owner: Reviewer) -> list[Form]:
    """List the reviewer's forms (possibly empty)."""
    return await repository.get_by_owner(db, owner.id)


async def delete_form(db: AsyncSession, owner: Reviewer, token: str) -> None:
    """
    Delete one of the reviewer's forms along with its submissions.

    Raises:
        UnauthorizedError: If the form does not exist or belongs to someone else
    """
    deleted = await repository.delete_owned(db, token, owner.id)
    if not deleted:
        logger.warning(f"Reviewer {owner.id} tried to delete form it does not own")
        raise UnauthorizedError("Unauthorized to delete the form")

    logger.info(f"Form deleted by reviewer {owner.id}")
