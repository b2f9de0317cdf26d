"""
Tests for the forms service.
"""

from unittest.mock import AsyncMock, patch

import pytest

from volugram.core.errors import (
    FormNotFoundError,
    UnauthorizedError,
    UnsupportedLocaleError,
    ValidationError,
)
from volugram.modules.forms.service import (
    create_form,
    delete_form,
    get_public_form,
    list_forms,
)

SERVICE = "volugram.modules.forms.service"


class TestCreateForm:
    @pytest.mark.asyncio
    async def test_create_form_defaults_to_english(self, mock_db, reviewer, sample_form):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.create = AsyncMock(return_value=sample_form)

            token = await create_form(mock_db, reviewer, {"title": "Beach cleanup"})

            assert token == sample_form.token
            kwargs = mock_repo.create.call_args.kwargs
            assert kwargs["user_id"] == reviewer.id
            assert kwargs["language"] == "en"
            assert kwargs["certificate_logo"] is None
            assert len(kwargs["token"]) == 36

    @pytest.mark.asyncio
    async def test_create_form_tokens_differ(self, mock_db, reviewer, sample_form):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.create = AsyncMock(return_value=sample_form)

            await create_form(mock_db, reviewer, {"a": 1}, language="no")
            await create_form(mock_db, reviewer, {"a": 1}, language="no")

            first, second = (call.kwargs["token"] for call in mock_repo.create.call_args_list)
            assert first != second
            assert mock_repo.create.call_args.kwargs["language"] == "no"

    @pytest.mark.asyncio
    async def test_create_form_empty_definition(self, mock_db, reviewer):
        with pytest.raises(ValidationError) as exc_info:
            await create_form(mock_db, reviewer, {})

        assert exc_info.value.message == "Invalid form data"

    @pytest.mark.asyncio
    async def test_create_form_unsupported_language(self, mock_db, reviewer):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.create = AsyncMock()

            with pytest.raises(UnsupportedLocaleError):
                await create_form(mock_db, reviewer, {"a": 1}, language="fr")

            mock_repo.create.assert_not_called()


class TestFormAccess:
    @pytest.mark.asyncio
    async def test_get_public_form(self, mock_db, sample_form):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_by_token = AsyncMock(return_value=sample_form)

            assert await get_public_form(mock_db, sample_form.token) is sample_form

    @pytest.mark.asyncio
    async def test_get_public_form_missing(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_by_token = AsyncMock(return_value=None)

            with pytest.raises(FormNotFoundError):
                await get_public_form(mock_db, "missing")

    @pytest.mark.asyncio
    async def test_list_forms_empty(self, mock_db, reviewer):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_by_owner = AsyncMock(return_value=[])

            assert await list_forms(mock_db, reviewer) == []
            mock_repo.get_by_owner.assert_awaited_once_with(mock_db, reviewer.id)

    @pytest.mark.asyncio
    async def test_delete_form_owned(self, mock_db, reviewer, sample_form):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.delete_owned = AsyncMock(return_value=True)

            await delete_form(mock_db, reviewer, sample_form.token)

            mock_repo.delete_owned.assert_awaited_once_with(mock_db, sample_form.token, reviewer.id)

    @pytest.mark.asyncio
    async def test_delete_form_not_owned(self, mock_db, other_reviewer, sample_form):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.delete_owned = AsyncMock(return_value=False)

            with pytest.raises(UnauthorizedError) as exc_info:
                await delete_form(mock_db, other_reviewer, sample_form.token)

            assert exc_info.value.status_code == 403
