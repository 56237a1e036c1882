"""
Rate Limiting Module

Per-user sliding-window rate limits on write endpoints (applying to
vacancies, admin decisions). Uses the shared Redis client and falls back to
in-memory counting when Redis is unavailable.
"""

import logging
import time
import uuid

from fastapi import HTTPException, status
from redis.asyncio import Redis

from tutormatch.core import redis as redis_state

logger = logging.getLogger(__name__)

KEY_PREFIX = "tutormatch:rate_limit"

# In-memory fallback: {key: [timestamp, ...]}
_memory_store: dict[str, list[float]] = {}


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
    Sliding window over a Redis sorted set.

    Returns:
        True if request is allowed, False if rate limit exceeded
    """
    now = time.time()

    pipe = client.pipeline()
    pipe.zremrangebyscore(key, 0, now - window_seconds)
    pipe.zcard(key)
    # Unique member so concurrent requests in the same instant all count
    pipe.zadd(key, {f"{now}:{uuid.uuid4().hex[:8]}": now})
    pipe.expire(key, window_seconds)

    results = await pipe.execute()
    return results[1] < limit


def _check_rate_limit_memory(key: str, limit: int, window_seconds: int) -> bool:
    """
    Fallback when Redis is unavailable. Counts per process only.
    """
    now = time.time()
    window_start = now - window_seconds

    timestamps = [ts for ts in _memory_store.get(key, []) if ts > window_start]
    if len(timestamps) >= limit:
        _memory_store[key] = timestamps
        return False

    timestamps.append(now)
    _memory_store[key] = timestamps
    return True


async def check_rate_limit(key: str, limit: int, window_seconds: int) -> bool:
    """
    Check if a request is within rate limits.

    Args:
        key: Unique key for this limit (e.g., "apply:<teacher_id>")
        limit: Maximum requests allowed in the window
        window_seconds: Time window in seconds

    Returns:
        True if request is allowed, False if rate limit exceeded
    """
    full_key = f"{KEY_PREFIX}:{key}"
    client = redis_state.redis_client

    if client is not None:
        try:
            return await _check_rate_limit_redis(client, full_key, limit, window_seconds)
        except Exception as e:
            logger.warning(f"Redis rate limit check failed, using memory: {e}")

    return _check_rate_limit_memory(full_key, limit, window_seconds)


async def enforce_rate_limit(key: str, limit: int, window_seconds: int) -> None:
    """
    Raises:
        RateLimitExceeded: If the caller is over the limit (HTTP 429)
    """
    if not await check_rate_limit(key, limit, window_seconds):
        logger.warning(f"Rate limit exceeded for {key}: {limit}/{window_seconds}s")
        raise RateLimitExceeded(limit, window_seconds)


def reset_memory_store() -> None:
    """Clear in-memory counters (used by tests)."""
    _memory_store.clear()


__all__ = [
    "check_rate_limit",
    "enforce_rate_limit",
    "reset_memory_store",
    "RateLimitExceeded",
]
