"""
User Repository

Database operations for reviewer accounts.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from volugram.modules.users.models import User

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user database operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        name: str,
        email: str,
        password_hash: str,
    ) -> User:
        """
        Create a new user record.

        Args:
            db: Database session
            name: Display name
            email: User's email address (unique)
            password_hash: bcrypt hash

        Returns:
            Created User instance
        """
        user = User(name=name, email=email, password_hash=password_hash)

        db.add(user)
        await db.commit()
        await db.refresh(user)

        logger.info(f"Created user: {user.id} - {user.email}")
        return user

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: int) -> User | None:
        """Get a user by ID."""
        return await db.get(User, user_id)

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> User | None:
        """
        Get a user by email address.

        Args:
            db: Database session
            email: Email address

        Returns:
            User instance or None if not found
        """
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    @staticmethod
    async def email_exists(db: AsyncSession, email: str) -> bool:
        """Check if an email address is already registered."""
        user = await UserRepository.get_by_email(db, email)
        return user is not None

    @staticmethod
    async def update_password(db: AsyncSession, email: str, password_hash: str) -> bool:
        """
        Replace the password hash of the account with this email.

        Returns:
            True if a row was updated
        """
        result = await db.execute(
            update(User).where(User.email == email).values(password_hash=password_hash)
        )
        await db.commit()
        return result.rowcount > 0

    @staticmethod
    async def update_name(db: AsyncSession, user_id: int, name: str) -> User | None:
        """Change a user's display name; returns None if the user is gone."""
        user = await db.get(User, user_id)
        if user is None:
            return None

        user.name = name
        await db.commit()
        await db.refresh(user)
        return user
