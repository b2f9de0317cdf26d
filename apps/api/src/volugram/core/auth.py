"""
Authentication Dependencies

Resolves the reviewer behind a request from the Bearer access token issued
at login. Token signature and expiry are checked by security.decode_token.
"""

import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from volugram.core.security import decode_token

logger = logging.getLogger(__name__)

# Security scheme for OpenAPI documentation
security = HTTPBearer(
    auto_error=True,
    description="JWT Bearer token for authentication",
)


@dataclass
class Reviewer:
    """
    An authenticated reviewer, populated from JWT claims.

    Attributes:
        id: User ID (integer primary key)
        email: User's email address
        name: Display name at login time
    """

    id: int
    email: str
    name: str

    def __str__(self) -> str:
        return f"Reviewer(id={self.id}, email={self.email})"


def _unauthorized(error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def reviewer_from_token(token: str) -> Reviewer:
    """
    Validate an access token and build the Reviewer it identifies.

    Raises:
        HTTPException 401: If the token is invalid, expired or malformed
    """
    payload = decode_token(token)

    if payload is None:
        logger.warning("Invalid or expired JWT token")
        raise _unauthorized("INVALID_TOKEN", "Invalid or expired authentication token.")

    if payload.get("type", "access") != "access":
        logger.warning(f"Invalid token type: {payload.get('type')}")
        raise _unauthorized("INVALID_TOKEN_TYPE", "This endpoint requires an access token.")

    try:
        return Reviewer(
            id=int(payload["sub"]),
            email=payload.get("email", ""),
            name=payload.get("name", ""),
        )
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Invalid token claims: {e}")
        raise _unauthorized(
            "INVALID_TOKEN_CLAIMS", "Token contains invalid or missing claims."
        ) from e


async def get_current_reviewer(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Reviewer:
    """
    FastAPI dependency returning the authenticated reviewer.

    Usage:
        @router.get("/review/submissions")
        async def list_pending(reviewer: Reviewer = Depends(get_current_reviewer)):
            ...

    Raises:
        HTTPException 401: If token is missing, invalid, or expired
    """
    reviewer = reviewer_from_token(credentials.credentials)
    logger.debug(f"Authenticated {reviewer}")
    return reviewer


__all__ = [
    "Reviewer",
    "get_current_reviewer",
    "reviewer_from_token",
]
