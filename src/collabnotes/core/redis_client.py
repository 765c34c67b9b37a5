"""Redis client used as the real-time notification channel."""

import json
import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis

from ..config import get_settings

logger = logging.getLogger(__name__)


class RedisClient:
    """Thin async wrapper around a Redis connection pool."""

    def __init__(self):
        self.settings = get_settings()
        self.redis: Optional[redis.Redis] = None

    @property
    def is_connected(self) -> bool:
        return self.redis is not None

    async def connect(self) -> None:
        """Connect to Redis."""
        try:
            self.redis = redis.from_url(
                self.settings.redis_url,
                max_connections=self.settings.redis_max_connections,
                decode_responses=True,
            )
            # Test connection
            await self.redis.ping()
            logger.info("Connected to Redis successfully")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            self.redis = None
            raise

    async def disconnect(self) -> None:
        """Disconnect from Redis."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            logger.info("Disconnected from Redis")

    async def ping(self) -> bool:
        if not self.redis:
            return False
        try:
            return bool(await self.redis.ping())
        except Exception as e:
            logger.error(f"Redis PING error: {e}")
            return False

    async def publish(self, channel: str, payload: Dict[str, Any]) -> int:
        """Publish a JSON payload; returns the number of subscribers reached."""
        if not self.redis:
            logger.warning(f"Redis not connected, dropping message for {channel}")
            return 0
        try:
            return await self.redis.publish(channel, json.dumps(payload, default=str))
        except Exception as e:
            logger.error(f"Redis PUBLISH error for channel {channel}: {e}")
            return 0


# Singleton instance
_redis_client: Optional[RedisClient] = None


def get_redis_client() -> RedisClient:
    """Get Redis client singleton."""
    global _redis_client
    if _redis_client is None:
        _redis_client = RedisClient()
    return _redis_client
