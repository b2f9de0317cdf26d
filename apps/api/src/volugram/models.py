"""
Model registry.

Imports every ORM model so relationship targets resolve and Alembic sees
the full metadata.
"""

from volugram.core.database import Base
from volugram.modules.forms.models import Form
from volugram.modules.submissions.models import Submission, SubmissionStatus
from volugram.modules.users.models import User

__all__ = ["Base", "Form", "Submission", "SubmissionStatus", "User"]
