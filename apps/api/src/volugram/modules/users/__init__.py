"""
Users module - Reviewer accounts.
"""

from volugram.modules.users.models import User
from volugram.modules.users.repository import UserRepository

__all__ = ["User", "UserRepository"]
