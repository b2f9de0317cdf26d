"""
Redis Client

Shared async client for the rate limiter's sliding windows. The API keeps
working without Redis; the limiter then counts per process.
"""

from redis.asyncio import Redis, from_url

from volugram.core.config import settings

redis_client: Redis | None = None


async def init_redis() -> Redis:
    """Connect and ping; the client is only published once the ping succeeds."""
    global redis_client
    client = from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
    await client.ping()
    redis_client = client
    return client


async def get_redis() -> Redis | None:
    """The connected client, or None when Redis was unavailable at startup."""
    return redis_client


async def close_redis() -> None:
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None
