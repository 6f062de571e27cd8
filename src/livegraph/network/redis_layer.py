"""
Redis Pub/Sub transport for subscriptions.

Protocol (all messages JSON):
    client -> "<prefix>.subscribe":   {"type": "subscribe", "id", "name", "query", "variables"}
    client -> "<prefix>.subscribe":   {"type": "unsubscribe", "id"}
    server -> "<prefix>.<id>":        {"type": "data", "payload": {...}}
                                      {"type": "error", "errors": [...]}
                                      {"type": "complete"}
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

from ..core.config import LivegraphConfig
from ..core.errors import TransportError
from .client import RedisClient, get_redis_client
from .request import SubscriptionRequest

logger = logging.getLogger(__name__)


class RedisSubscriptionHandle:
    """
    Disposable for one Redis-backed subscription.

    `dispose` may be called from any thread. Off the listener's loop the
    cancellation is handed to that loop.
    """

    def __init__(
        self,
        layer: RedisSubscriptionNetworkLayer,
        request: SubscriptionRequest,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.layer = layer
        self.request = request
        self.loop = loop
        self.task: Optional[asyncio.Task] = None
        self.disposed = False

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        self.layer._forget(self)
        if self.task is None:
            return

        try:
            running_loop = asyncio.get_running_loop()
        except RuntimeError:
            running_loop = None

        if running_loop is not None and running_loop is self.loop:
            # The listener stops by itself when disposed from one of its callbacks
            if self.task is not asyncio.current_task():
                self.task.cancel()
        elif self.loop is not None and not self.loop.is_closed():
            self.loop.call_soon_threadsafe(self.task.cancel)


class RedisSubscriptionNetworkLayer:
    """
    Network layer sending subscriptions over Redis Pub/Sub.

    Must be used from a running event loop: `send_subscription` schedules a
    listener task and returns immediately.

    Usage:
        client = await init_redis("redis://redis:6379")
        network = RedisSubscriptionNetworkLayer(client)
        environment = Environment(store=InMemoryRecordStore(), network_layer=network)
        disposable = create_subscription(environment, AddTodoSubscription(...))
    """

    def __init__(
        self,
        client: Optional[RedisClient] = None,
        channel_prefix: Optional[str] = None,
        config: Optional[LivegraphConfig] = None,
    ):
        config = config or LivegraphConfig.from_dict({})
        self.client = client or get_redis_client(config.redis_url)
        self.channel_prefix = channel_prefix or config.channel_prefix
        self._handles: dict[str, RedisSubscriptionHandle] = {}

    @property
    def request_channel(self) -> str:
        return f"{self.channel_prefix}.subscribe"

    def get_channel(self, client_subscription_id: str) -> str:
        return f"{self.channel_prefix}.{client_subscription_id}"

    @property
    def subscription_count(self) -> int:
        return len(self._handles)

    def send_subscription(self, request: SubscriptionRequest) -> RedisSubscriptionHandle:
        loop = asyncio.get_running_loop()
        handle = RedisSubscriptionHandle(self, request, loop)
        self._handles[request.get_client_subscription_id()] = handle
        handle.task = loop.create_task(self._run(handle))
        # A task cancelled before it starts never reaches `_run`'s cleanup
        handle.task.add_done_callback(lambda _task: self._forget(handle))
        return handle

    def _forget(self, handle: RedisSubscriptionHandle) -> None:
        subscription_id = handle.request.get_client_subscription_id()
        if self._handles.get(subscription_id) is handle:
            del self._handles[subscription_id]

    async def _run(self, handle: RedisSubscriptionHandle) -> None:
        request = handle.request
        subscription_id = request.get_client_subscription_id()
        channel = self.get_channel(subscription_id)
        pubsub = None

        try:
            await self.client.connect()
            pubsub = self.client.pubsub()
            await pubsub.subscribe(channel)
            await self.client.publish(
                self.request_channel,
                json.dumps({"type": "subscribe", **request.to_payload()}, ensure_ascii=False, default=str),
            )
            logger.info(f"Subscription {subscription_id} ({request.get_debug_name()}) listening on {channel}")

            while not handle.disposed:
                message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
                if not message or message["type"] != "message":
                    continue
                try:
                    if self._dispatch(request, message["data"]):
                        break
                except Exception as e:
                    logger.error(f"Subscription {subscription_id} callback failed: {e}", exc_info=True)
                    break
        except asyncio.CancelledError:
            logger.info(f"Subscription {subscription_id} listener cancelled")
        except Exception as e:
            logger.error(f"Subscription {subscription_id} transport error: {e}", exc_info=True)
            request.on_error(TransportError(str(e)))
        finally:
            self._forget(handle)
            await self._cleanup(handle, pubsub, channel)

    def _dispatch(self, request: SubscriptionRequest, raw_data: Any) -> bool:
        """Deliver one message. Returns True when the subscription ended."""
        try:
            data = json.loads(raw_data) if isinstance(raw_data, (str, bytes)) else raw_data
        except json.JSONDecodeError:
            logger.warning(f"Invalid JSON for subscription {request.get_client_subscription_id()}: {str(raw_data)[:100]}")
            return False

        kind = data.get("type") if isinstance(data, dict) else None
        if kind == "data":
            request.on_next(data.get("payload"))
            return False
        if kind == "error":
            errors = data.get("errors") or []
            request.on_error(TransportError(f"Subscription failed: {errors}", errors=errors))
            return True
        if kind == "complete":
            request.on_completed()
            return True

        logger.warning(f"Unknown message type {kind!r} for subscription {request.get_client_subscription_id()}")
        return False

    async def _cleanup(self, handle: RedisSubscriptionHandle, pubsub: Any, channel: str) -> None:
        subscription_id = handle.request.get_client_subscription_id()
        try:
            if pubsub is not None:
                await pubsub.unsubscribe(channel)
                await pubsub.close()
            if handle.disposed:
                await self.client.publish(
                    self.request_channel,
                    json.dumps({"type": "unsubscribe", "id": subscription_id}),
                )
        except Exception as e:
            logger.warning(f"Cleanup failed for subscription {subscription_id}: {e}")
        logger.info(f"Subscription {subscription_id} closed")
