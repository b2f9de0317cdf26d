"""
Unit tests for the submissions repository layer.

Covers the status state machine and the conditional decision statements.
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from volugram.modules.submissions import repository
from volugram.modules.submissions.models import (
    VALID_STATUS_TRANSITIONS,
    SubmissionStatus,
    can_transition,
)


def _compiled(statement) -> str:
    return str(statement.compile(dialect=postgresql.dialect()))


class TestStatusTransitions:
    """Tests for the submission state machine."""

    def test_pending_can_be_decided(self):
        valid = VALID_STATUS_TRANSITIONS[SubmissionStatus.PENDING]
        assert SubmissionStatus.CONFIRMED in valid
        assert SubmissionStatus.REJECTED in valid

    def test_terminal_states_have_no_transitions(self):
        assert VALID_STATUS_TRANSITIONS[SubmissionStatus.CONFIRMED] == set()
        assert VALID_STATUS_TRANSITIONS[SubmissionStatus.REJECTED] == set()

    def test_all_statuses_are_in_transition_map(self):
        for status in SubmissionStatus:
            assert status in VALID_STATUS_TRANSITIONS

    def test_cannot_go_backwards_from_confirmed(self):
        assert not can_transition(SubmissionStatus.CONFIRMED, SubmissionStatus.PENDING)
        assert not can_transition(SubmissionStatus.CONFIRMED, SubmissionStatus.REJECTED)
        assert not can_transition(SubmissionStatus.CONFIRMED, SubmissionStatus.CONFIRMED)


class TestConditionalDecisions:
    """The decision statements only match pending rows and report whether they won."""

    @pytest.mark.asyncio
    async def test_confirm_if_pending_won(self, mock_db):
        mock_db.execute.return_value = MagicMock(rowcount=1)

        won = await repository.confirm_if_pending(
            mock_db, 5, confirmed_by="Anna", comment="ok", certificate_pdf=b"pdf"
        )

        assert won is True
        mock_db.commit.assert_awaited_once()
        sql = _compiled(mock_db.execute.call_args.args[0])
        assert sql.startswith("UPDATE submissions")
        assert "submissions.status = " in sql
        assert "submissions.id = " in sql

    @pytest.mark.asyncio
    async def test_confirm_if_pending_lost(self, mock_db):
        mock_db.execute.return_value = MagicMock(rowcount=0)

        won = await repository.confirm_if_pending(
            mock_db, 5, confirmed_by="Anna", comment=None, certificate_pdf=b"pdf"
        )

        assert won is False

    @pytest.mark.asyncio
    async def test_delete_if_pending(self, mock_db):
        mock_db.execute.return_value = MagicMock(rowcount=1)

        assert await repository.delete_if_pending(mock_db, 5) is True

        sql = _compiled(mock_db.execute.call_args.args[0])
        assert sql.startswith("DELETE FROM submissions")
        assert "submissions.status = " in sql

    @pytest.mark.asyncio
    async def test_delete_if_pending_lost(self, mock_db):
        mock_db.execute.return_value = MagicMock(rowcount=0)
        assert await repository.delete_if_pending(mock_db, 5) is False
