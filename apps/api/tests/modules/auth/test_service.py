"""
Tests for the account service.
"""

from unittest.mock import AsyncMock, patch

import pytest

from volugram.core.errors import (
    AuthenticationError,
    EmailAlreadyRegisteredError,
    InvalidTokenError,
    UserNotFoundError,
    ValidationError,
)
from volugram.core.security import decode_token
from volugram.core.tokens import PendingRegistration
from volugram.modules.auth.service import (
    activate,
    check_password_reset,
    login,
    register,
    rename,
    request_password_reset,
    reset_password,
)

SERVICE = "volugram.modules.auth.service"


class TestRegister:
    """Tests for register function."""

    @pytest.mark.asyncio
    async def test_register_issues_activation_link(self, mock_db, registries):
        with (
            patch(f"{SERVICE}.UserRepository") as mock_repo,
            patch(f"{SERVICE}.hash_password", return_value="hashed"),
            patch(f"{SERVICE}.send_account_activation", new_callable=AsyncMock) as mock_email,
        ):
            mock_repo.email_exists = AsyncMock(return_value=False)
            mock_repo.create = AsyncMock()
            mock_email.return_value = True

            await register(mock_db, registries, "Ann", "ann@example.org", "secret")

            # No account until the link is opened
            mock_repo.create.assert_not_called()
            to_email, name, token = mock_email.call_args.args
            assert (to_email, name) == ("ann@example.org", "Ann")
            assert registries.activation.peek(token) == PendingRegistration(
                name="Ann", email="ann@example.org", password_hash="hashed"
            )

    @pytest.mark.asyncio
    async def test_register_existing_email(self, mock_db, registries):
        with (
            patch(f"{SERVICE}.UserRepository") as mock_repo,
            patch(f"{SERVICE}.send_account_activation", new_callable=AsyncMock) as mock_email,
        ):
            mock_repo.email_exists = AsyncMock(return_value=True)

            with pytest.raises(EmailAlreadyRegisteredError):
                await register(mock_db, registries, "Ann", "ann@example.org", "secret")

            mock_email.assert_not_called()
            assert len(registries.activation) == 0

    @pytest.mark.asyncio
    async def test_register_missing_fields(self, mock_db, registries):
        with pytest.raises(ValidationError):
            await register(mock_db, registries, "Ann", "ann@example.org", "")

    @pytest.mark.asyncio
    async def test_register_email_failure_still_issues_link(self, mock_db, registries):
        with (
            patch(f"{SERVICE}.UserRepository") as mock_repo,
            patch(f"{SERVICE}.hash_password", return_value="hashed"),
            patch(f"{SERVICE}.send_account_activation", new_callable=AsyncMock, return_value=False),
        ):
            mock_repo.email_exists = AsyncMock(return_value=False)

            await register(mock_db, registries, "Ann", "ann@example.org", "secret")

            assert len(registries.activation) == 1

    @pytest.mark.asyncio
    async def test_register_password_too_long(self, mock_db, registries):
        with (
            patch(f"{SERVICE}.UserRepository") as mock_repo,
            patch(f"{SERVICE}.send_account_activation", new_callable=AsyncMock) as mock_email,
        ):
            mock_repo.email_exists = AsyncMock(return_value=False)

            with pytest.raises(ValidationError) as exc_info:
                await register(mock_db, registries, "Ann", "ann@example.org", "ä" * 40)

            assert exc_info.value.error_code == "PASSWORD_TOO_LONG"
            mock_email.assert_not_called()
            assert len(registries.activation) == 0


class TestActivate:
    """Tests for activate function."""

    @pytest.mark.asyncio
    async def test_activate_creates_user_once(self, mock_db, registries, sample_user):
        token = registries.activation.issue(
            PendingRegistration(name="Ann", email="ann@example.org", password_hash="hashed")
        )
        with patch(f"{SERVICE}.UserRepository") as mock_repo:
            mock_repo.email_exists = AsyncMock(return_value=False)
            mock_repo.create = AsyncMock(return_value=sample_user)

            user = await activate(mock_db, registries, token)

            assert user is sample_user
            mock_repo.create.assert_awaited_once_with(
                mock_db, name="Ann", email="ann@example.org", password_hash="hashed"
            )

            with pytest.raises(InvalidTokenError):
                await activate(mock_db, registries, token)

            assert mock_repo.create.await_count == 1

    @pytest.mark.asyncio
    async def test_activate_unknown_token(self, mock_db, registries):
        with pytest.raises(InvalidTokenError) as exc_info:
            await activate(mock_db, registries, "nope")

        assert "expired" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_activate_email_taken_meanwhile(self, mock_db, registries):
        token = registries.activation.issue(
            PendingRegistration(name="Ann", email="ann@example.org", password_hash="hashed")
        )
        with patch(f"{SERVICE}.UserRepository") as mock_repo:
            mock_repo.email_exists = AsyncMock(return_value=True)
            mock_repo.create = AsyncMock()

            with pytest.raises(EmailAlreadyRegisteredError):
                await activate(mock_db, registries, token)

            mock_repo.create.assert_not_called()
            assert registries.activation.peek(token) is None


class TestLogin:
    """Tests for login function."""

    @pytest.mark.asyncio
    async def test_login_success(self, mock_db, sample_user):
        with (
            patch(f"{SERVICE}.UserRepository") as mock_repo,
            patch(f"{SERVICE}.verify_password", return_value=True),
        ):
            mock_repo.get_by_email = AsyncMock(return_value=sample_user)

            token, user = await login(mock_db, "leader@example.org", "secret")

            assert user is sample_user
            claims = decode_token(token)
            assert claims["sub"] == "1"
            assert claims["email"] == "leader@example.org"
            assert claims["name"] == "Team Leader"

    @pytest.mark.asyncio
    async def test_login_unknown_email(self, mock_db):
        with patch(f"{SERVICE}.UserRepository") as mock_repo:
            mock_repo.get_by_email = AsyncMock(return_value=None)

            with pytest.raises(AuthenticationError):
                await login(mock_db, "nobody@example.org", "secret")

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, mock_db, sample_user):
        with (
            patch(f"{SERVICE}.UserRepository") as mock_repo,
            patch(f"{SERVICE}.verify_password", return_value=False),
        ):
            mock_repo.get_by_email = AsyncMock(return_value=sample_user)

            with pytest.raises(AuthenticationError) as exc_info:
                await login(mock_db, "leader@example.org", "wrong")

            assert exc_info.value.status_code == 401


class TestPasswordReset:
    """Tests for the password reset flow."""

    @pytest.mark.asyncio
    async def test_request_reset_unknown_email(self, mock_db, registries):
        with patch(f"{SERVICE}.UserRepository") as mock_repo:
            mock_repo.email_exists = AsyncMock(return_value=False)

            with pytest.raises(ValidationError) as exc_info:
                await request_password_reset(mock_db, registries, "nobody@example.org")

            assert exc_info.value.error_code == "INVALID_EMAIL"
            assert len(registries.password_reset) == 0

    @pytest.mark.asyncio
    async def test_request_reset_sends_link(self, mock_db, registries):
        with (
            patch(f"{SERVICE}.UserRepository") as mock_repo,
            patch(f"{SERVICE}.send_password_reset", new_callable=AsyncMock) as mock_email,
        ):
            mock_repo.email_exists = AsyncMock(return_value=True)
            mock_email.return_value = True

            await request_password_reset(mock_db, registries, "leader@example.org")

            to_email, token = mock_email.call_args.args
            assert to_email == "leader@example.org"
            assert check_password_reset(registries, token) == "leader@example.org"

    @pytest.mark.asyncio
    async def test_reset_revokes_other_links(self, mock_db, registries):
        first = registries.password_reset.issue("leader@example.org")
        second = registries.password_reset.issue("leader@example.org")
        other = registries.password_reset.issue("someone@example.org")

        with (
            patch(f"{SERVICE}.UserRepository") as mock_repo,
            patch(f"{SERVICE}.hash_password", return_value="new-hash"),
        ):
            mock_repo.update_password = AsyncMock(return_value=True)

            await reset_password(mock_db, registries, first, "new-secret")

            mock_repo.update_password.assert_awaited_once_with(
                mock_db, "leader@example.org", "new-hash"
            )

        with pytest.raises(InvalidTokenError):
            check_password_reset(registries, second)
        assert check_password_reset(registries, other) == "someone@example.org"

    @pytest.mark.asyncio
    async def test_reset_link_is_single_use(self, mock_db, registries):
        token = registries.password_reset.issue("leader@example.org")
        with (
            patch(f"{SERVICE}.UserRepository") as mock_repo,
            patch(f"{SERVICE}.hash_password", return_value="new-hash"),
        ):
            mock_repo.update_password = AsyncMock(return_value=True)

            await reset_password(mock_db, registries, token, "new-secret")

            with pytest.raises(InvalidTokenError):
                await reset_password(mock_db, registries, token, "again")

            assert mock_repo.update_password.await_count == 1

    @pytest.mark.asyncio
    async def test_reset_for_vanished_account(self, mock_db, registries):
        token = registries.password_reset.issue("gone@example.org")
        with (
            patch(f"{SERVICE}.UserRepository") as mock_repo,
            patch(f"{SERVICE}.hash_password", return_value="new-hash"),
        ):
            mock_repo.update_password = AsyncMock(return_value=False)

            with pytest.raises(UserNotFoundError):
                await reset_password(mock_db, registries, token, "new-secret")

    @pytest.mark.asyncio
    async def test_reset_requires_password(self, mock_db, registries):
        token = registries.password_reset.issue("leader@example.org")

        with pytest.raises(ValidationError):
            await reset_password(mock_db, registries, token, "")

        # Link survives a rejected attempt
        assert check_password_reset(registries, token) == "leader@example.org"

    @pytest.mark.asyncio
    async def test_reset_password_too_long_keeps_link(self, mock_db, registries):
        token = registries.password_reset.issue("leader@example.org")
        with patch(f"{SERVICE}.UserRepository") as mock_repo:
            mock_repo.update_password = AsyncMock(return_value=True)

            with pytest.raises(ValidationError) as exc_info:
                await reset_password(mock_db, registries, token, "x" * 80)

            assert exc_info.value.error_code == "PASSWORD_TOO_LONG"
            mock_repo.update_password.assert_not_called()

        assert check_password_reset(registries, token) == "leader@example.org"


class TestRename:
    @pytest.mark.asyncio
    async def test_rename_strips_name(self, mock_db, reviewer, sample_user):
        with patch(f"{SERVICE}.UserRepository") as mock_repo:
            mock_repo.update_name = AsyncMock(return_value=sample_user)

            await rename(mock_db, reviewer, "  New Name ")

            mock_repo.update_name.assert_awaited_once_with(mock_db, reviewer.id, "New Name")

    @pytest.mark.asyncio
    async def test_rename_rejects_blank(self, mock_db, reviewer):
        with pytest.raises(ValidationError):
            await rename(mock_db, reviewer, "   ")
