"""
Redis client for the pub/sub transport.

Provides a shared Redis connection for publishing requests and listening on
subscription channels.
"""

from __future__ import annotations

import logging
from typing import Optional

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


class RedisClient:
    """
    Redis connection wrapper.

    Usage:
        client = RedisClient("redis://redis:6379")
        await client.connect()

        await client.publish("livegraph.subscribe", "{...}")
        pubsub = client.pubsub()
    """

    def __init__(self, redis_url: str):
        """
        Initialize Redis client.

        Args:
            redis_url: Redis connection URL
        """
        self.redis_url = redis_url
        self._redis: Optional[aioredis.Redis] = None
        self._connected = False

    async def connect(self):
        """Connect to Redis"""
        if self._connected:
            return

        logger.info(f"Connecting to Redis: {self.redis_url}")
        self._redis = await aioredis.from_url(
            self.redis_url,
            encoding="utf-8",
            decode_responses=True
        )
        self._connected = True
        logger.info("Redis client connected")

    async def disconnect(self):
        """Disconnect from Redis"""
        if self._redis:
            await self._redis.close()
            self._connected = False
            logger.info("Redis client disconnected")

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def redis(self) -> aioredis.Redis:
        """Get underlying Redis connection"""
        if not self._connected or not self._redis:
            raise RuntimeError("Redis client not connected. Call await client.connect() first.")
        return self._redis

    async def publish(self, channel: str, message: str) -> int:
        """
        Publish message to channel.

        Returns:
            Number of subscribers that received the message
        """
        return await self.redis.publish(channel, message)

    def pubsub(self) -> aioredis.client.PubSub:
        """Get pub/sub instance for subscribing to channels"""
        return self.redis.pubsub()


_global_client: Optional[RedisClient] = None


def get_redis_client(redis_url: Optional[str] = None) -> RedisClient:
    """
    Get global Redis client instance.

    Args:
        redis_url: Redis URL (required on first call)
    """
    global _global_client
    if _global_client is None:
        if redis_url is None:
            raise ValueError("redis_url is required on first call")
        _global_client = RedisClient(redis_url)
    return _global_client


async def init_redis(redis_url: str) -> RedisClient:
    """
    Initialize and connect the global Redis client.

    Call this during application startup.
    """
    client = get_redis_client(redis_url)
    await client.connect()
    logger.info("Redis transport initialized")
    return client


async def close_redis():
    """Close global Redis client"""
    global _global_client
    if _global_client:
        await _global_client.disconnect()
        _global_client = None
