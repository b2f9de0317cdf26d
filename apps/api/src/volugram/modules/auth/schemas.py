"""Authentication schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class RegisterRequest(BaseModel):
    """Registration request schema."""

    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr
    password: str


class UserResponse(BaseModel):
    """Public view of a reviewer account."""

    id: int
    name: str
    email: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    """Login response schema."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class PasswordResetRequest(BaseModel):
    """Request body for POST /auth/password-reset."""

    email: EmailStr


class PasswordResetConfirm(BaseModel):
    """Request body for POST /auth/password-reset/{token}."""

    password: str = Field(..., min_length=1)


class RenameRequest(BaseModel):
    """Request body for PUT /auth/me/name."""

    name: str = Field(..., min_length=1, max_length=200)


class MessageResponse(BaseModel):
    message: str
