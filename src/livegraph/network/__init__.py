"""
Network module - transport interfaces and the Redis Pub/Sub transport.

Usage:
    from livegraph.network import RedisSubscriptionNetworkLayer, init_redis

    client = await init_redis("redis://redis:6379")
    network = RedisSubscriptionNetworkLayer(client, channel_prefix="livegraph")
"""

from __future__ import annotations

from .base import (
    CallbackDisposable,
    Disposable,
    NetworkLayer,
    SubscriptionCallbacks,
)
from .client import RedisClient, close_redis, get_redis_client, init_redis
from .redis_layer import RedisSubscriptionHandle, RedisSubscriptionNetworkLayer
from .request import SubscriptionRequest

__all__ = [
    # Interfaces
    "Disposable",
    "CallbackDisposable",
    "NetworkLayer",
    "SubscriptionCallbacks",
    "SubscriptionRequest",
    # Redis
    "RedisClient",
    "get_redis_client",
    "init_redis",
    "close_redis",
    "RedisSubscriptionHandle",
    "RedisSubscriptionNetworkLayer",
]
