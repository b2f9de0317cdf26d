"""
Account Service

Reviewer registration, activation, login and password reset.

Registration does not create a user row. It stores the pending account in
the activation registry and emails a link; the user is created when that
link is redeemed. Password reset links work the same way through the reset
registry, and a successful reset revokes every other reset link for the
same address.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from volugram.core.auth import Reviewer
from volugram.core.email import send_account_activation, send_password_reset
from volugram.core.errors import (
    AuthenticationError,
    EmailAlreadyRegisteredError,
    InvalidTokenError,
    UserNotFoundError,
    ValidationError,
)
from volugram.core.security import create_access_token, hash_password, verify_password
from volugram.core.tokens import PendingRegistration, TokenRegistries
from volugram.modules.users.models import User
from volugram.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


async def register(
    db: AsyncSession,
    registries: TokenRegistries,
    name: str | None,
    email: str | None,
    password: str | None,
) -> None:
    """
    Start registration by emailing an activation link.

    Raises:
        ValidationError: If a field is missing or the password is too long
        EmailAlreadyRegisteredError: If the email already has an account
    """
    if not name or not email or not password:
        raise ValidationError()

    if await UserRepository.email_exists(db, email):
        raise EmailAlreadyRegisteredError()

    pending = PendingRegistration(name=name, email=email, password_hash=hash_password(password))
    token = registries.activation.issue(pending)

    sent = await send_account_activation(email, name, token)
    if not sent:
        logger.error("Activation email was not delivered")

    logger.info("Registration started, activation link issued")


async def activate(db: AsyncSession, registries: TokenRegistries, token: str) -> User:
    """
    Redeem an activation link and create the account.

    The token is consumed even when the email turns out to be taken.

    Raises:
        InvalidTokenError: If the token is unknown, expired or already used
        EmailAlreadyRegisteredError: If the email was registered meanwhile
    """
    pending = registries.activation.redeem(token)
    if pending is None:
        raise InvalidTokenError("Invalid confirmation link or link expired")

    if await UserRepository.email_exists(db, pending.email):
        raise EmailAlreadyRegisteredError()

    user = await UserRepository.create(
        db,
        name=pending.name,
        email=pending.email,
        password_hash=pending.password_hash,
    )
    logger.info(f"Account activated: user {user.id}")
    return user


async def login(db: AsyncSession, email: str, password: str) -> tuple[str, User]:
    """
    Check credentials and issue an access token.

    Returns:
        (access token, user)

    Raises:
        AuthenticationError: If the email is unknown or the password is wrong
    """
    user = await UserRepository.get_by_email(db, email)

    if user is None:
        logger.warning("Login attempt for non-existent email")
        raise AuthenticationError()

    if not verify_password(password, user.password_hash):
        logger.warning(f"Invalid password for user {user.id}")
        raise AuthenticationError()

    access_token = create_access_token(
        subject=str(user.id),
        additional_claims={"email": user.email, "name": user.name},
    )

    logger.info(f"User logged in: {user.id}")
    return access_token, user


async def request_password_reset(
    db: AsyncSession,
    registries: TokenRegistries,
    email: str | None,
) -> None:
    """
    Email a password reset link.

    Raises:
        ValidationError: If the email is missing or has no account
    """
    if not email or not await UserRepository.email_exists(db, email):
        raise ValidationError("Invalid email", error_code="INVALID_EMAIL")

    token = registries.password_reset.issue(email)

    sent = await send_password_reset(email, token)
    if not sent:
        logger.error("Password reset email was not delivered")


def check_password_reset(registries: TokenRegistries, token: str) -> str:
    """
    Check that a reset link is still usable without consuming it.

    Returns:
        The email the link belongs to

    Raises:
        InvalidTokenError: If the token is unknown, expired or already used
    """
    email = registries.password_reset.peek(token)
    if email is None:
        raise InvalidTokenError("Invalid password reset link or link expired")
    return email


async def reset_password(
    db: AsyncSession,
    registries: TokenRegistries,
    token: str,
    password: str | None,
) -> None:
    """
    Redeem a reset link and set the new password.

    Every other outstanding reset link for the same email is revoked.

    Raises:
        ValidationError: If the password is missing or too long
        InvalidTokenError: If the token is unknown, expired or already used
        UserNotFoundError: If the account disappeared after the link was issued
    """
    if not password:
        raise ValidationError()

    # Hashed before redeeming so a rejected password leaves the link usable
    password_hash = hash_password(password)

    email = registries.password_reset.redeem(token)
    if email is None:
        raise InvalidTokenError("Invalid or expired token")

    updated = await UserRepository.update_password(db, email, password_hash)
    revoked = registries.password_reset.revoke_where(lambda pending_email: pending_email == email)

    if not updated:
        raise UserNotFoundError()

    logger.info(f"Password reset completed, {revoked} sibling link(s) revoked")


async def get_profile(db: AsyncSession, reviewer: Reviewer) -> User:
    """
    Raises:
        UserNotFoundError: If the account no longer exists
    """
    user = await UserRepository.get_by_id(db, reviewer.id)
    if user is None:
        raise UserNotFoundError()
    return user


async def rename(db: AsyncSession, reviewer: Reviewer, name: str | None) -> User:
    """
    Change the reviewer's display name.

    Raises:
        ValidationError: If the name is empty
        UserNotFoundError: If the account no longer exists
    """
    if not name or not name.strip():
        raise ValidationError()

    user = await UserRepository.update_name(db, reviewer.id, name.strip())
    if user is None:
        raise UserNotFoundError()
    return user
