"""
Authentication Router

Endpoints:
- POST /auth/register - Start registration (emails an activation link)
- GET /auth/activate/{token} - Activation link target (HTML page)
- POST /auth/login - Exchange credentials for an access token
- POST /auth/password-reset - Email a password reset link
- GET /auth/password-reset/{token} - Reset link target (HTML form)
- POST /auth/password-reset/{token} - Set the new password
- GET /auth/me - Current reviewer
- PUT /auth/me/name - Rename current reviewer
"""

import logging
from html import escape

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from volugram.core.auth import Reviewer, get_current_reviewer
from volugram.core.database import get_db
from volugram.core.errors import VolugramError, internal_error
from volugram.core.rate_limit import (
    RATE_LIMIT_LOGIN,
    RATE_LIMIT_PASSWORD_RESET,
    RATE_LIMIT_REGISTER,
    limit_by_ip,
)
from volugram.core.tokens import TokenRegistries, get_token_registries
from volugram.modules.auth import service
from volugram.modules.auth.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    RegisterRequest,
    RenameRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <style>
    body {{ background-color: #141219; color: #939eab; font-family: sans-serif; font-weight: bold;
           display: flex; flex-direction: column; justify-content: center; align-items: center;
           height: 100vh; padding: 0 33px; }}
    .message {{ text-align: center; font-size: 28px; margin-bottom: 20px; }}
    .info-text {{ font-size: 16px; }}
    input[type="password"] {{ margin-bottom: 10px; padding: 10px; width: 100%; }}
    input[type="submit"] {{ padding: 10px; background-color: #45a049; color: white; border: none; cursor: pointer; }}
  </style>
  <title>{title}</title>
</head>
<body>
{body}
</body>
</html>
"""

_RESET_FORM = """  <div class="message">Reset Your Password</div>
  <form id="resetForm" method="POST">
    <label for="password">New Password:</label>
    <input type="password" id="password" name="password" required>
    <input type="submit" value="Reset Password">
  </form>
  <div id="resetMessage" class="info-text"></div>
  <script>
    document.getElementById('resetForm').addEventListener('submit', async (e) => {{
      e.preventDefault();
      const response = await fetch('{action}', {{
        method: 'POST',
        headers: {{ 'Content-Type': 'application/json' }},
        body: JSON.stringify({{ password: document.getElementById('password').value }})
      }});
      document.getElementById('resetMessage').innerText = response.ok
        ? 'Password reset successful! You can now close this tab.'
        : 'The link is invalid or expired.';
    }});
  </script>"""


def _page(title: str, message: str, info: str = "", status_code: int = 200) -> HTMLResponse:
    body = f'  <div class="message">{escape(message)}</div>'
    if info:
        body += f'\n  <div class="info-text">{escape(info)}</div>'
    return HTMLResponse(_PAGE.format(title=escape(title), body=body), status_code=status_code)


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    dependencies=[Depends(limit_by_ip("register", *RATE_LIMIT_REGISTER))],
)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    registries: TokenRegistries = Depends(get_token_registries),
) -> MessageResponse:
    """
    Start registration; the account exists once the emailed link is opened.

    Raises:
        HTTPException 409: Email already registered
    """
    try:
        await service.register(db, registries, data.name, data.email, data.password)
        return MessageResponse(message="Confirmation link has been sent")
    except VolugramError as e:
        raise e.to_http_exception() from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Unexpected error during registration: {e}")
        raise internal_error() from e


@router.get("/activate/{token}", response_class=HTMLResponse, summary="Activate Account")
async def activate(
    token: str,
    db: AsyncSession = Depends(get_db),
    registries: TokenRegistries = Depends(get_token_registries),
) -> HTMLResponse:
    """Activation link target. Answers with a small HTML page."""
    title = "Volugram Account Activation"
    try:
        await service.activate(db, registries, token)
    except VolugramError as e:
        return _page(title, e.message, status_code=e.status_code)

    return _page(title, "Account activated successfully!", "You can now close this tab.")


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Login",
    dependencies=[Depends(limit_by_ip("login", *RATE_LIMIT_LOGIN))],
)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """
    Authenticate a reviewer and return an access token.

    Raises:
        HTTPException 401: Invalid credentials
    """
    try:
        access_token, user = await service.login(db, credentials.email, credentials.password)
    except VolugramError as e:
        raise e.to_http_exception() from e

    return LoginResponse(
        access_token=access_token,
        token_type="bearer",
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/password-reset",
    response_model=MessageResponse,
    summary="Request Password Reset",
    dependencies=[Depends(limit_by_ip("password_reset", *RATE_LIMIT_PASSWORD_RESET))],
)
async def request_password_reset(
    data: PasswordResetRequest,
    db: AsyncSession = Depends(get_db),
    registries: TokenRegistries = Depends(get_token_registries),
) -> MessageResponse:
    """
    Email a password reset link.

    Raises:
        HTTPException 400: Unknown email
    """
    try:
        await service.request_password_reset(db, registries, data.email)
        return MessageResponse(message="Password reset link has been sent")
    except VolugramError as e:
        raise e.to_http_exception() from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Unexpected error requesting password reset: {e}")
        raise internal_error() from e


@router.get(
    "/password-reset/{token}",
    response_class=HTMLResponse,
    summary="Password Reset Page",
)
async def password_reset_page(
    token: str,
    registries: TokenRegistries = Depends(get_token_registries),
) -> HTMLResponse:
    """Reset link target: an HTML form posting the new password. Does not consume the link."""
    title = "Volugram Password Reset"
    try:
        service.check_password_reset(registries, token)
    except VolugramError as e:
        return _page(title, e.message, status_code=e.status_code)

    body = _RESET_FORM.format(action=f"/api/v1/auth/password-reset/{escape(token)}")
    return HTMLResponse(_PAGE.format(title=title, body=body))


@router.post(
    "/password-reset/{token}",
    response_model=MessageResponse,
    summary="Reset Password",
)
async def reset_password(
    token: str,
    data: PasswordResetConfirm,
    db: AsyncSession = Depends(get_db),
    registries: TokenRegistries = Depends(get_token_registries),
) -> MessageResponse:
    """
    Set a new password using a reset link.

    Raises:
        HTTPException 400: Link invalid, expired or already used
    """
    try:
        await service.reset_password(db, registries, token, data.password)
        return MessageResponse(message="Password reset successful")
    except VolugramError as e:
        raise e.to_http_exception() from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Unexpected error resetting password: {e}")
        raise internal_error() from e


@router.get("/me", response_model=UserResponse, summary="Current Reviewer")
async def me(
    reviewer: Reviewer = Depends(get_current_reviewer),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    try:
        user = await service.get_profile(db, reviewer)
    except VolugramError as e:
        raise e.to_http_exception() from e
    return UserResponse.model_validate(user)


@router.put("/me/name", response_model=UserResponse, summary="Rename Current Reviewer")
async def rename(
    data: RenameRequest,
    reviewer: Reviewer = Depends(get_current_reviewer),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Change the display name used as the default confirmer name."""
    try:
        user = await service.rename(db, reviewer, data.name)
    except VolugramError as e:
        raise e.to_http_exception() from e
    return UserResponse.model_validate(user)
