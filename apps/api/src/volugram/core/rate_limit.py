"""
Rate Limiting Module

Sliding-window rate limiting for the public endpoints, backed by Redis sorted
sets. Falls back to an in-process store when Redis is unavailable.

Limited endpoints:
- Anonymous submissions (captcha is checked too, but costs a round trip)
- Registration and password reset (each sends an email)
- Certificate archive requests (each sends an email with attachments)
"""

import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import HTTPException, Request, status
from redis.asyncio import Redis
from redis.exceptions import RedisError

from volugram.core.redis import get_redis

logger = logging.getLogger(__name__)

# In-memory rate limit storage (fallback when Redis unavailable)
# Format: {key: [timestamp, ...]}
_memory_store: dict[str, list[float]] = {}

# (limit, window_seconds) per endpoint group
RATE_LIMIT_SUBMIT = (10, 60)
RATE_LIMIT_REGISTER = (5, 300)
RATE_LIMIT_PASSWORD_RESET = (5, 300)
RATE_LIMIT_CERTIFICATES = (3, 300)
RATE_LIMIT_LOGIN = (10, 60)


class RateLimitExceeded(HTTPException):
    """Exception raised when rate limit is exceeded."""

    def __init__(self, limit: int, window_seconds: int):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error": "RATE_LIMIT_EXCEEDED",
                "message": f"Rate limit exceeded. Maximum {limit} requests per {window_seconds} seconds.",
                "retry_after_seconds": window_seconds,
            },
            headers={"Retry-After": str(window_seconds)},
        )


async def _check_rate_limit_redis(
    client: Redis,
    key: str,
    limit: int,
    window_seconds: int,
) -> bool:
    """
    Check rate limit using a Redis sorted set as a sliding window.

    Returns:
        True if request is allowed, False if rate limit exceeded
    """
    now = time.time()
    window_start = now - window_seconds

    pipe = client.pipeline()
    pipe.zremrangebyscore(key, 0, window_start)
    pipe.zcard(key)
    pipe.zadd(key, {str(now): now})
    pipe.expire(key, window_seconds)

    results = await pipe.execute()
    current_count = results[1]

    return current_count < limit


def _check_rate_limit_memory(key: str, limit: int, window_seconds: int) -> bool:
    """
    Check rate limit using in-memory storage.

    Only counts requests seen by this process.
    """
    now = time.time()
    window_start = now - window_seconds

    hits = [ts for ts in _memory_store.get(key, []) if ts > window_start]
    if len(hits) >= limit:
        _memory_store[key] = hits
        return False

    hits.append(now)
    _memory_store[key] = hits
    return True


async def check_rate_limit(key: str, limit: int, window_seconds: int) -> bool:
    """
    Check if a request is within rate limits.

    Tries Redis first, falls back to in-memory storage.

    Args:
        key: Unique key for this rate limit (e.g., "submit:203.0.113.7")
        limit: Maximum requests allowed in the window
        window_seconds: Time window in seconds

    Returns:
        True if request is allowed, False if rate limit exceeded
    """
    client = await get_redis()

    if client is not None:
        try:
            return await _check_rate_limit_redis(client, key, limit, window_seconds)
        except RedisError as e:
            logger.warning(f"Redis rate limit check failed, using memory: {e}")

    return _check_rate_limit_memory(key, limit, window_seconds)


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def limit_by_ip(
    scope: str,
    limit: int,
    window_seconds: int,
) -> Callable[[Request], Awaitable[None]]:
    """
    Build a FastAPI dependency that rate limits an endpoint per client IP.

    Usage:
        @router.post("", dependencies=[Depends(limit_by_ip("submit", *RATE_LIMIT_SUBMIT))])
        async def submit(...):
            ...

    Raises:
        RateLimitExceeded: When rate limit is exceeded (HTTP 429)
    """

    async def dependency(request: Request) -> None:
        key = f"rate_limit:{scope}:{client_ip(request)}"
        allowed = await check_rate_limit(key, limit, window_seconds)
        if not allowed:
            logger.warning(f"Rate limit exceeded for {key}: {limit}/{window_seconds}s")
            raise RateLimitExceeded(limit, window_seconds)

    return dependency


def reset_memory_store() -> None:
    """Clear the in-memory fallback store (used by tests)."""
    _memory_store.clear()


__all__ = [
    "check_rate_limit",
    "limit_by_ip",
    "reset_memory_store",
    "RateLimitExceeded",
    "RATE_LIMIT_SUBMIT",
    "RATE_LIMIT_REGISTER",
    "RATE_LIMIT_PASSWORD_RESET",
    "RATE_LIMIT_CERTIFICATES",
    "RATE_LIMIT_LOGIN",
]
