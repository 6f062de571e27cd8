"""
Tests for ``livegraph.network.redis_layer``.

Uses an in-process stand-in for the Redis client, so no server is needed.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from unittest.mock import MagicMock

import pytest

from livegraph.core import ConcreteSubscription, LivegraphConfig, TransportError
from livegraph.network import (
    RedisClient,
    RedisSubscriptionNetworkLayer,
    SubscriptionCallbacks,
    SubscriptionRequest,
)
from livegraph.query import CLIENT_SUBSCRIPTION_ID, build_subscription_query
from livegraph.subscription import Environment, create_subscription

from support import AddTodoSubscription, todo_edge_field


class FakePubSub:
    def __init__(self):
        self.channels = []
        self.closed = False
        self.messages = asyncio.Queue()

    async def subscribe(self, channel):
        self.channels.append(channel)

    async def unsubscribe(self, channel):
        self.channels.remove(channel)

    async def close(self):
        self.closed = True

    async def get_message(self, ignore_subscribe_messages=False, timeout=None):
        try:
            return await asyncio.wait_for(self.messages.get(), timeout=0.05)
        except asyncio.TimeoutError:
            return None

    def push(self, data):
        raw = data if isinstance(data, str) else json.dumps(data)
        self.messages.put_nowait({"type": "message", "channel": self.channels[0], "data": raw})


class FakeRedisClient:
    def __init__(self, fail_connect=False):
        self.fail_connect = fail_connect
        self.published = []
        self.pubsubs = []

    async def connect(self):
        if self.fail_connect:
            raise ConnectionError("Connection refused")

    async def publish(self, channel, message):
        self.published.append((channel, json.loads(message)))
        return 1

    def pubsub(self):
        pubsub = FakePubSub()
        self.pubsubs.append(pubsub)
        return pubsub


async def wait_until(predicate):
    for _ in range(200):
        if predicate():
            return
        await asyncio.sleep(0.01)
    raise AssertionError("condition not met in time")


@pytest.fixture
def client():
    return FakeRedisClient()


@pytest.fixture
def layer(client):
    return RedisSubscriptionNetworkLayer(client, channel_prefix="todos")


def make_request(callbacks, client_id="abc"):
    node = ConcreteSubscription(
        name="AddTodoSubscription",
        call_name="addTodoSubscribe",
        children=[todo_edge_field()],
    )
    query = build_subscription_query(node, {CLIENT_SUBSCRIPTION_ID: client_id}, [])
    return SubscriptionRequest(query, callbacks)


def mock_callbacks():
    return SubscriptionCallbacks(on_next=MagicMock(), on_error=MagicMock(), on_completed=MagicMock())


class TestChannels:
    def test_channel_names(self, layer):
        assert layer.request_channel == "todos.subscribe"
        assert layer.get_channel("1C") == "todos.1C"

    def test_prefix_from_config(self, client):
        layer = RedisSubscriptionNetworkLayer(client, config=LivegraphConfig(channel_prefix="app"))
        assert layer.request_channel == "app.subscribe"

    def test_requires_running_loop(self, layer):
        with pytest.raises(RuntimeError):
            layer.send_subscription(make_request(mock_callbacks()))


class TestListener:
    @pytest.mark.asyncio
    async def test_subscribes_and_publishes_request(self, layer, client):
        request = make_request(mock_callbacks())
        handle = layer.send_subscription(request)
        await wait_until(lambda: client.published)

        channel, message = client.published[0]
        assert channel == "todos.subscribe"
        assert message["type"] == "subscribe"
        assert message["id"] == "abc"
        assert message["query"] == request.get_query_string()
        assert client.pubsubs[0].channels == ["todos.abc"]
        assert layer.subscription_count == 1

        handle.dispose()
        await handle.task

        assert client.published[-1] == ("todos.subscribe", {"type": "unsubscribe", "id": "abc"})
        assert client.pubsubs[0].closed
        assert layer.subscription_count == 0

    @pytest.mark.asyncio
    async def test_delivers_data(self, layer, client):
        callbacks = mock_callbacks()
        handle = layer.send_subscription(make_request(callbacks))
        await wait_until(lambda: client.pubsubs and client.pubsubs[0].channels)

        client.pubsubs[0].push({"type": "data", "payload": {"addTodoSubscribe": {"todoEdge": None}}})
        await wait_until(lambda: callbacks.on_next.called)

        callbacks.on_next.assert_called_once_with({"addTodoSubscribe": {"todoEdge": None}})
        handle.dispose()
        await handle.task

    @pytest.mark.asyncio
    async def test_complete_ends_listener(self, layer, client):
        callbacks = mock_callbacks()
        handle = layer.send_subscription(make_request(callbacks))
        await wait_until(lambda: client.pubsubs and client.pubsubs[0].channels)

        client.pubsubs[0].push({"type": "complete"})
        await handle.task

        callbacks.on_completed.assert_called_once_with()
        callbacks.on_error.assert_not_called()
        assert client.pubsubs[0].closed

    @pytest.mark.asyncio
    async def test_error_message(self, layer, client):
        callbacks = mock_callbacks()
        handle = layer.send_subscription(make_request(callbacks))
        await wait_until(lambda: client.pubsubs and client.pubsubs[0].channels)

        client.pubsubs[0].push({"type": "error", "errors": [{"message": "Not allowed"}]})
        await handle.task

        [error], _ = callbacks.on_error.call_args
        assert isinstance(error, TransportError)
        assert error.errors == [{"message": "Not allowed"}]

    @pytest.mark.asyncio
    async def test_invalid_json_is_skipped(self, layer, client, caplog):
        callbacks = mock_callbacks()
        handle = layer.send_subscription(make_request(callbacks))
        await wait_until(lambda: client.pubsubs and client.pubsubs[0].channels)

        with caplog.at_level(logging.WARNING, logger="livegraph.network.redis_layer"):
            client.pubsubs[0].push("{not json")
            client.pubsubs[0].push({"type": "data", "payload": {}})
            await wait_until(lambda: callbacks.on_next.called)

        assert "Invalid JSON for subscription abc" in caplog.text
        handle.dispose()
        await handle.task

    @pytest.mark.asyncio
    async def test_connection_failure_goes_to_on_error(self):
        layer = RedisSubscriptionNetworkLayer(FakeRedisClient(fail_connect=True), channel_prefix="todos")
        callbacks = mock_callbacks()

        handle = layer.send_subscription(make_request(callbacks))
        await handle.task

        [error], _ = callbacks.on_error.call_args
        assert isinstance(error, TransportError)
        assert "Connection refused" in str(error)


class TestDispatch:
    def test_unknown_type_is_ignored(self, layer, caplog):
        callbacks = mock_callbacks()
        with caplog.at_level(logging.WARNING, logger="livegraph.network.redis_layer"):
            ended = layer._dispatch(make_request(callbacks), json.dumps({"type": "ping"}))

        assert ended is False
        assert "Unknown message type 'ping'" in caplog.text
        callbacks.on_next.assert_not_called()

    def test_accepts_decoded_messages(self, layer):
        callbacks = mock_callbacks()
        assert layer._dispatch(make_request(callbacks), {"type": "complete"}) is True
        callbacks.on_completed.assert_called_once_with()


class TestDisposal:
    @pytest.mark.asyncio
    async def test_dispose_before_listener_starts(self, layer, client, store):
        disposable = create_subscription(Environment(store, layer), AddTodoSubscription())
        assert layer.subscription_count == 1

        disposable.dispose()
        assert layer.subscription_count == 0

        await asyncio.sleep(0.05)
        assert layer.subscription_count == 0
        assert client.published == []

    @pytest.mark.asyncio
    async def test_finished_listener_is_forgotten(self):
        layer = RedisSubscriptionNetworkLayer(FakeRedisClient(fail_connect=True), channel_prefix="todos")
        handle = layer.send_subscription(make_request(mock_callbacks()))

        await handle.task
        await asyncio.sleep(0)
        assert layer.subscription_count == 0

    @pytest.mark.asyncio
    async def test_dispose_from_another_thread(self, layer, client):
        handle = layer.send_subscription(make_request(mock_callbacks()))
        await wait_until(lambda: client.pubsubs and client.pubsubs[0].channels)
        errors = []

        def dispose():
            try:
                handle.dispose()
            except Exception as e:
                errors.append(e)

        thread = threading.Thread(target=dispose)
        thread.start()
        thread.join()
        await handle.task

        assert errors == []
        assert handle.disposed
        assert layer.subscription_count == 0
        assert client.published[-1] == ("todos.subscribe", {"type": "unsubscribe", "id": "abc"})


class TestConfig:
    def test_env_overrides_default_redis_url(self, monkeypatch):
        monkeypatch.setenv("LIVEGRAPH_REDIS_URL", "redis://env:6379")
        monkeypatch.setattr("livegraph.network.client._global_client", None)

        layer = RedisSubscriptionNetworkLayer()

        assert isinstance(layer.client, RedisClient)
        assert layer.client.redis_url == "redis://env:6379"
        assert layer.channel_prefix == "livegraph"


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_payload_is_written_before_on_next(self, layer, client, store):
        seen = []
        disposable = create_subscription(
            Environment(store, layer),
            AddTodoSubscription(),
            SubscriptionCallbacks(on_next=lambda payload: seen.append(store.get_range("VXNlcjox", "todos"))),
        )
        await wait_until(lambda: client.pubsubs and client.pubsubs[0].channels)
        handle = layer._handles["0"]

        client.pubsubs[0].push({
            "type": "data",
            "payload": {"addTodoSubscribe": {
                "todoEdge": {"cursor": "c1", "node": {"id": "t1", "text": "Buy milk"}},
                CLIENT_SUBSCRIPTION_ID: "0",
            }},
        })
        await wait_until(lambda: seen)

        assert seen == [["t1"]]
        assert client.published[0][1]["variables"]["input"][CLIENT_SUBSCRIPTION_ID] == "0"

        disposable.dispose()
        await handle.task
        assert handle.disposed
        assert client.published[-1][1] == {"type": "unsubscribe", "id": "0"}
