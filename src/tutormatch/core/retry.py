"""
Retry helpers for best-effort secondary writes.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int = 3,
    backoff_seconds: float = 0.5,
    description: str = "operation",
) -> T:
    """
    Run `operation` until it succeeds, waiting backoff_seconds * 2**n between tries.

    Args:
        operation: Zero-argument coroutine function
        attempts: Maximum number of tries (>= 1)
        backoff_seconds: Base delay for the exponential backoff
        description: Label used in log messages

    Returns:
        The operation's result

    Raises:
        The last exception once all attempts have failed
    """
    last_error: Exception | None = None

    for attempt in range(attempts):
        try:
            return await operation()
        except Exception as e:
            last_error = e
            if attempt < attempts - 1:
                wait = backoff_seconds * (2**attempt)
                logger.warning(
                    f"{description} attempt {attempt + 1}/{attempts} failed: {e}. "
                    f"Retrying in {wait:.2f}s..."
                )
                await asyncio.sleep(wait)

    raise last_error  # type: ignore[misc]
