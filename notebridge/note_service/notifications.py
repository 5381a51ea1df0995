"""Best-effort push notification dispatch.

Notifications are fire-and-forget: a dispatcher reports success as a bool and
never raises, so a failed delivery can't undo the operation that triggered it.
"""

from __future__ import annotations

import json
from typing import Protocol, runtime_checkable

import redis.asyncio as aioredis
from loguru import logger
from redis.exceptions import RedisError


@runtime_checkable
class NotificationDispatcher(Protocol):
    async def notify(self, target_user_id: str, title: str, body: str, data: dict[str, str]) -> bool:
        """Deliver a notification.  Returns False on failure; never raises."""
        ...


class RedisNotifier:
    """Publish notifications on a per-user Redis pub/sub channel.

    Channel: ``{channel_prefix}:{target_user_id}``.  The push gateway
    subscribed to that channel forwards the payload to the user's devices.
    """

    def __init__(self, client: aioredis.Redis, channel_prefix: str) -> None:
        self._client = client
        self._channel_prefix = channel_prefix

    async def notify(self, target_user_id: str, title: str, body: str, data: dict[str, str]) -> bool:
        channel = f"{self._channel_prefix}:{target_user_id}"
        payload = json.dumps({"title": title, "body": body, "data": data})
        try:
            receivers = await self._client.publish(channel, payload)
        except RedisError:
            logger.exception("Failed to publish notification to {}", channel)
            return False
        logger.debug("Notification published to {} ({} receivers)", channel, receivers)
        return True


class LoggingNotifier:
    """Fallback dispatcher when no transport is configured: logs and succeeds."""

    async def notify(self, target_user_id: str, title: str, body: str, data: dict[str, str]) -> bool:
        logger.info("Notification for {}: {} -- {} {}", target_user_id, title, body, data)
        return True
