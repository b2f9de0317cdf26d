"""
Shared test fixtures.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

# Registers every ORM model so relationships resolve
import volugram.models  # noqa: F401
from volugram.core.auth import Reviewer
from volugram.core.tokens import TokenRegistries
from volugram.modules.forms.models import Form
from volugram.modules.submissions.models import Submission, SubmissionStatus
from volugram.modules.users.models import User


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.refresh = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def reviewer():
    """The authenticated reviewer owning the sample form."""
    return Reviewer(id=1, email="leader@example.org", name="Team Leader")


@pytest.fixture
def other_reviewer():
    """A reviewer who owns nothing in the fixtures."""
    return Reviewer(id=2, email="someone@example.org", name="Someone Else")


@pytest.fixture
def registries():
    """Fresh token registries without expiry."""
    return TokenRegistries.create()


@pytest.fixture
def volunteer_payload():
    """Submission answers for John Doe's cleaning shift."""
    return {
        "hours": 6,
        "minutes": 25,
        "position": "Cleaner",
        "eventTitle": "asd",
        "location": "Tartu",
        "startDate": "2024-01-04",
        "endDate": "2024-01-05",
        "volunteerReview": [{"name": "Teamwork", "rating": 3}],
    }


@pytest.fixture
def reviewer_categories():
    return [{"name": "Teamwork", "rating": 4}]


@pytest.fixture
def sample_form(reviewer):
    """A form owned by the reviewer fixture."""
    form = MagicMock(spec=Form)
    form.id = 10
    form.user_id = reviewer.id
    form.token = "0b6f3f7e-7c1a-4a0e-9a57-2f1d4f3c9d11"
    form.definition = {"title": "Beach cleanup"}
    form.certificate_logo = None
    form.language = "en"
    form.created_at = datetime.now(UTC)
    return form


@pytest.fixture
def pending_submission(sample_form, volunteer_payload):
    """A pending submission against the sample form."""
    submission = MagicMock(spec=Submission)
    submission.id = 100
    submission.form_id = sample_form.id
    submission.email = "john.doe@example.org"
    submission.full_name = "John Doe"
    submission.payload = volunteer_payload
    submission.status = SubmissionStatus.PENDING
    submission.confirmed_by = None
    submission.comment = None
    submission.certificate_pdf = None
    submission.created_at = datetime.now(UTC)
    return submission


@pytest.fixture
def confirmed_submission(pending_submission):
    pending_submission.status = SubmissionStatus.CONFIRMED
    pending_submission.confirmed_by = "Team Leader"
    pending_submission.certificate_pdf = b"%PDF-1.4 first"
    return pending_submission


@pytest.fixture
def sample_user():
    user = MagicMock(spec=User)
    user.id = 1
    user.name = "Team Leader"
    user.email = "leader@example.org"
    user.password_hash = "$2b$04$invalidhashforfixtureonly000000000000000000000000000"
    user.created_at = datetime.now(UTC)
    return user
