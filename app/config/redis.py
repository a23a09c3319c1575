# app/config/redis.py
"""Redis configuration and connection setup"""
import redis.asyncio as redis

from app.config.settings import get_settings

settings = get_settings()


def create_redis_pool(url: str = None) -> redis.ConnectionPool:
    """Create a Redis connection pool; the caller owns and disconnects it"""
    return redis.ConnectionPool.from_url(
        url or settings.REDIS_URL,
        max_connections=settings.REDIS_MAX_CONNECTIONS,
        retry_on_timeout=True,
    )


# Redis key patterns for different data types
class RedisKeys:
    """Redis key patterns for consistent naming"""

    # Real-time notification channels
    USER_NOTIFICATIONS = "notifications:{user_id}"
