"""
Real-time Notification Channel

Fire-and-forget event fan-out to connected admin dashboards.

Flow:
    publish() -> bounded in-process queue -> dispatcher task
              -> Redis pub/sub channel -> listener task (every API instance)
              -> per-subscriber queues -> WebSocket connections

Delivery is at-most-once. publish() never awaits anything: when the queue is
full the event is dropped and a warning is logged. Without Redis the
dispatcher delivers straight to local subscribers (single-instance mode).

Usage:
    from tutormatch.core import notifications

    notifications.publish(notifications.EVENT_NEW_APPLICATION, {...})
"""

import asyncio
import contextlib
import json
import logging
from typing import Any

from redis.asyncio import Redis

from tutormatch.core.config import settings

logger = logging.getLogger(__name__)

EVENT_NEW_APPLICATION = "NEW_APPLICATION"
EVENT_PARENT_STATUS_UPDATED = "PARENT_STATUS_UPDATED"

LISTENER_RETRY_SECONDS = 5


class NotificationChannelUnavailable(RuntimeError):
    """Raised by publish() when the broker has not been started."""


class NotificationBroker:
    """
    Bounded, non-blocking publish/subscribe broker.

    Args:
        redis: Redis client for cross-instance fan-out, or None for local only
        channel: Redis channel name
        queue_size: Capacity of the outbound event queue
        subscriber_queue_size: Capacity of each subscriber's queue
    """

    def __init__(
        self,
        redis: Redis | None = None,
        *,
        channel: str = settings.notification_channel,
        queue_size: int = settings.notification_queue_size,
        subscriber_queue_size: int = settings.notification_subscriber_queue_size,
    ):
        self._redis = redis
        self._channel = channel
        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=queue_size)
        self._subscriber_queue_size = subscriber_queue_size
        self._subscribers: set[asyncio.Queue[str]] = set()
        self._tasks: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event_type: str, payload: dict[str, Any]) -> bool:
        """
        Enqueue an event without blocking.

        Returns:
            True if the event was queued, False if it was dropped
        """
        try:
            self._queue.put_nowait({"type": event_type, "data": payload})
        except asyncio.QueueFull:
            logger.warning(f"Notification queue full, dropping {event_type} event")
            return False
        return True

    def subscribe(self) -> asyncio.Queue[str]:
        """Register a subscriber and return its message queue."""
        queue: asyncio.Queue[str] = asyncio.Queue(maxsize=self._subscriber_queue_size)
        self._subscribers.add(queue)
        logger.debug(f"Subscriber added ({len(self._subscribers)} connected)")
        return queue

    def unsubscribe(self, queue: asyncio.Queue[str]) -> None:
        self._subscribers.discard(queue)
        logger.debug(f"Subscriber removed ({len(self._subscribers)} connected)")

    def _fan_out(self, message: str) -> None:
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(message)
            except asyncio.QueueFull:
                # Slow consumer: drop for this subscriber only
                logger.debug("Subscriber queue full, dropping message")

    async def start(self) -> None:
        """Start the dispatcher (and the Redis listener when Redis is configured)."""
        if self.running:
            return
        self._tasks.append(asyncio.create_task(self._dispatch_loop(), name="notify-dispatch"))
        if self._redis is not None:
            self._tasks.append(asyncio.create_task(self._listen_loop(), name="notify-listen"))
        logger.info(
            f"Notification broker started (mode={'redis' if self._redis else 'local'}, "
            f"channel={self._channel})"
        )

    async def stop(self) -> None:
        """Cancel background tasks. Undelivered events are discarded."""
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._tasks.clear()
        logger.info("Notification broker stopped")

    async def _dispatch_loop(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                message = json.dumps(event, default=str)
                if self._redis is not None:
                    await self._redis.publish(self._channel, message)
                else:
                    self._fan_out(message)
            except Exception as e:
                logger.error(f"Failed to dispatch {event.get('type')} notification: {e}")
            finally:
                self._queue.task_done()

    async def _listen_loop(self) -> None:
        while True:
            pubsub = self._redis.pubsub()
            try:
                await pubsub.subscribe(self._channel)
                async for message in pubsub.listen():
                    if message.get("type") == "message":
                        self._fan_out(message["data"])
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(
                    f"Notification listener lost Redis subscription: {e}. "
                    f"Retrying in {LISTENER_RETRY_SECONDS}s"
                )
                await asyncio.sleep(LISTENER_RETRY_SECONDS)
            finally:
                with contextlib.suppress(Exception):
                    await pubsub.aclose()


# Global broker instance (set during application startup)
_broker: NotificationBroker | None = None


def get_broker() -> NotificationBroker | None:
    return _broker


async def start_notifications(redis: Redis | None) -> NotificationBroker:
    """Create and start the global broker. Call from the FastAPI lifespan."""
    global _broker
    if _broker is None:
        _broker = NotificationBroker(redis)
    await _broker.start()
    return _broker


async def stop_notifications() -> None:
    global _broker
    if _broker is not None:
        await _broker.stop()
        _broker = None


def publish(event_type: str, payload: dict[str, Any]) -> bool:
    """
    Publish an event on the global broker.

    Raises:
        NotificationChannelUnavailable: If the broker is not running
    """
    if _broker is None:
        raise NotificationChannelUnavailable("Notification broker is not running")
    return _broker.publish(event_type, payload)
