"""
Submissions module - volunteer submissions and their review workflow.
"""

from volugram.modules.submissions.review_router import router as review_router
from volugram.modules.submissions.router import router

__all__ = ["router", "review_router"]
