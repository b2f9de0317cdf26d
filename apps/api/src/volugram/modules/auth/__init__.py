"""Authentication module - reviewer accounts, login and password reset."""

from volugram.modules.auth.router import router
from volugram.modules.auth.schemas import LoginRequest, LoginResponse

__all__ = ["router", "LoginRequest", "LoginResponse"]
