# app/services/notification/publisher.py
"""Real-time fan-out of notification events over Redis pub/sub"""
import json
import logging
from typing import Optional

import redis.asyncio as redis

from app.config.redis import RedisKeys, create_redis_pool

logger = logging.getLogger(__name__)


class NotificationPublisher:
    """
    Owns its Redis client; created and closed by the application lifespan
    and handed to services explicitly.
    """

    def __init__(self, client: Optional[redis.Redis] = None, url: Optional[str] = None):
        self._client = client
        self._url = url
        self._pool: Optional[redis.ConnectionPool] = None

    @property
    def connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> "NotificationPublisher":
        if self._client is None:
            self._pool = create_redis_pool(self._url)
            self._client = redis.Redis(connection_pool=self._pool)
            logger.info("Notification publisher connected to Redis")
        return self

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None

    async def publish_to_user(self, user_id, event: dict) -> int:
        """Publish an event on the user's channel; returns the receiver count"""
        if self._client is None:
            return 0
        channel = RedisKeys.USER_NOTIFICATIONS.format(user_id=user_id)
        return await self._client.publish(channel, json.dumps(event, default=str))

    async def ping(self) -> bool:
        if self._client is None:
            return False
        return await self._client.ping()
