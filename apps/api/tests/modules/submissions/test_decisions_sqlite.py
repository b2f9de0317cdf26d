"""
Concurrent review decisions against a real database.

Two sessions read the same pending submission, both pass the pending guard,
then race their conditional UPDATE/DELETE. Exactly one decision may win and
exactly one notification may go out. Runs on SQLite through aiosqlite so no
database server is needed.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from volugram.core.auth import Reviewer
from volugram.core.database import Base
from volugram.core.errors import AlreadyConfirmedError
from volugram.models import Form, Submission, SubmissionStatus, User
from volugram.modules.submissions import repository
from volugram.modules.submissions.service import confirm, reject

SERVICE = "volugram.modules.submissions.service"


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'decisions.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def seeded(session_maker, volunteer_payload):
    """A reviewer, their form and one pending submission; returns (reviewer, submission id)."""
    async with session_maker() as session:
        user = User(name="Team Leader", email="leader@example.org", password_hash="x")
        session.add(user)
        await session.flush()

        form = Form(user_id=user.id, token="form-token", definition={"fields": []}, language="en")
        session.add(form)
        await session.flush()

        submission = Submission(
            form_id=form.id,
            email="john.doe@example.org",
            full_name="John Doe",
            payload=volunteer_payload,
            status=SubmissionStatus.PENDING,
        )
        session.add(submission)
        await session.commit()

        return Reviewer(id=user.id, email=user.email, name=user.name), submission.id


def _decide(session_maker, kind, submission_id, reviewer, reviewer_categories):
    async def run():
        async with session_maker() as session:
            if kind == "confirm":
                return await confirm(
                    session, submission_id, reviewer, "en", "Thanks", reviewer_categories
                )
            return await reject(session, submission_id, reviewer, "Not eligible", "en")

    return run()


class TestConcurrentDecisions:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "first, second",
        [("confirm", "reject"), ("reject", "confirm"), ("confirm", "confirm"), ("reject", "reject")],
    )
    async def test_exactly_one_decision_wins(
        self, session_maker, seeded, reviewer_categories, first, second
    ):
        reviewer, submission_id = seeded
        real_get_with_form = repository.get_with_form
        both_read = asyncio.Barrier(2)

        async def get_with_form_together(db, id):
            # Neither decision writes until both have seen the row as pending
            found = await real_get_with_form(db, id)
            await both_read.wait()
            return found

        with (
            patch.object(repository, "get_with_form", new=get_with_form_together),
            patch(f"{SERVICE}.render_certificate", return_value=b"%PDF-1.4 certificate"),
            patch(f"{SERVICE}.send_submission_accepted", new_callable=AsyncMock) as mock_accepted,
            patch(f"{SERVICE}.send_submission_rejected", new_callable=AsyncMock) as mock_rejected,
        ):
            mock_accepted.return_value = True
            mock_rejected.return_value = True

            results = await asyncio.wait_for(
                asyncio.gather(
                    _decide(session_maker, first, submission_id, reviewer, reviewer_categories),
                    _decide(session_maker, second, submission_id, reviewer, reviewer_categories),
                    return_exceptions=True,
                ),
                timeout=30,
            )

        assert sum(isinstance(r, AlreadyConfirmedError) for r in results) == 1
        assert sum(isinstance(r, Exception) for r in results) == 1
        assert mock_accepted.await_count + mock_rejected.await_count == 1

        winner = second if isinstance(results[0], AlreadyConfirmedError) else first
        async with session_maker() as session:
            stored = await session.get(Submission, submission_id)

        if winner == "confirm":
            assert mock_accepted.await_count == 1
            assert stored.status == SubmissionStatus.CONFIRMED
            assert stored.certificate_pdf == b"%PDF-1.4 certificate"
            assert stored.confirmed_by == "Team Leader"
        else:
            assert mock_rejected.await_count == 1
            assert stored is None


class TestConditionalStatements:
    @pytest.mark.asyncio
    async def test_second_confirm_matches_nothing(self, session_maker, seeded):
        _, submission_id = seeded
        async with session_maker() as session:
            first = await repository.confirm_if_pending(
                session, submission_id, confirmed_by="A", comment=None, certificate_pdf=b"one"
            )
            second = await repository.confirm_if_pending(
                session, submission_id, confirmed_by="B", comment=None, certificate_pdf=b"two"
            )

        assert (first, second) == (True, False)
        async with session_maker() as session:
            stored = await session.get(Submission, submission_id)
        assert stored.confirmed_by == "A"
        assert stored.certificate_pdf == b"one"

    @pytest.mark.asyncio
    async def test_confirmed_row_is_not_deleted(self, session_maker, seeded):
        _, submission_id = seeded
        async with session_maker() as session:
            await repository.confirm_if_pending(
                session, submission_id, confirmed_by="A", comment=None, certificate_pdf=b"pdf"
            )
            deleted = await repository.delete_if_pending(session, submission_id)

            assert deleted is False
            assert await repository.get_confirmed_certificates(
                session, "john.doe@example.org"
            ) == [(submission_id, b"pdf")]

    @pytest.mark.asyncio
    async def test_confirm_after_reject_matches_nothing(self, session_maker, seeded):
        _, submission_id = seeded
        async with session_maker() as session:
            assert await repository.delete_if_pending(session, submission_id) is True
            assert not await repository.confirm_if_pending(
                session, submission_id, confirmed_by="A", comment=None, certificate_pdf=b"pdf"
            )
