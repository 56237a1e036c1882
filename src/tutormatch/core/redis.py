"""
Redis Configuration

Async Redis client shared by rate limiting and the notification channel.
Redis is optional outside production: callers must handle `None`.
"""

import logging

from redis.asyncio import Redis, from_url

from tutormatch.core.config import settings

logger = logging.getLogger(__name__)

redis_client: Redis | None = None


async def init_redis() -> Redis:
    """
    Connect to Redis and verify the connection.

    Call this on application startup.
    """
    global redis_client
    client = from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    await client.ping()
    redis_client = client
    return redis_client


async def get_redis() -> Redis | None:
    """
    FastAPI dependency returning the Redis client, or None if unavailable.
    """
    return redis_client


async def close_redis() -> None:
    """Close the Redis connection."""
    global redis_client
    if redis_client:
        await redis_client.aclose()
        redis_client = None
        logger.debug("Redis connection closed")
