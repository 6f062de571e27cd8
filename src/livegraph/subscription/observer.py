"""
Subscription observers.

`ObserverLifecycle` is the generic part: an auto-detaching observer that
terminates at most once and releases its transport resource exactly once.
It delegates events to a handler object. `SubscriptionObserver` is the
handler for subscriptions: it builds the wire query and writes payloads to
the record store before calling the user's callbacks.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional, Protocol

from ..core.concrete import ConcreteSubscription
from ..core.configs import UpdateConfig, parse_configs
from ..core.errors import invariant
from ..core.nodes import Subscription as SubscriptionQuery
from ..network.base import CallbackDisposable, Disposable, SubscriptionCallbacks
from ..query.builder import CLIENT_SUBSCRIPTION_ID, build_subscription_query
from ..store.base import RecordStore
from .base import Subscription
from .ids import next_client_subscription_id

logger = logging.getLogger(__name__)


class ObserverHandler(Protocol):
    """Receives events from an ObserverLifecycle while it is active."""

    def next(self, data: Any) -> None:
        ...

    def error(self, error: Any) -> None:
        ...

    def completed(self) -> None:
        ...


class ObserverLifecycle:
    """
    Observer state machine: active -> terminated.

    - `on_next` is ignored once terminated. A failing handler disposes the
      observer and the failure propagates to the caller.
    - `on_error` / `on_completed` terminate, call the handler, then always
      dispose.
    - `dispose` is idempotent and releases the attached resource once.
    - `set_disposable` attaches the resource once; if already disposed the
      resource is released immediately.

    Flags are guarded by a re-entrant lock, so `dispose` from another thread
    waits for an in-flight delivery and a handler may dispose from inside a
    callback.
    """

    def __init__(self, handler: ObserverHandler, name: Optional[str] = None):
        self._handler = handler
        self._name = name or type(handler).__name__
        self._active = True
        self._disposed = False
        self._disposable: Optional[Disposable] = None
        self._lock = threading.RLock()

    @property
    def active(self) -> bool:
        return self._active

    @property
    def disposed(self) -> bool:
        return self._disposed

    def on_next(self, data: Any) -> None:
        with self._lock:
            if not self._active:
                return
            try:
                self._handler.next(data)
            except Exception:
                # A failing callback breaks the subscription
                self.dispose()
                raise

    def on_error(self, error: Any) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
            try:
                self._handler.error(error)
            finally:
                self.dispose()

    def on_completed(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
            try:
                self._handler.completed()
            finally:
                self.dispose()

    def dispose(self) -> None:
        with self._lock:
            self._active = False
            if self._disposed:
                return
            self._disposed = True
            disposable = self._disposable
        if disposable is not None:
            disposable.dispose()

    def set_disposable(self, disposable: Disposable) -> None:
        with self._lock:
            invariant(
                self._disposable is None,
                "%s: attempting to set disposable more than once",
                self._name,
            )
            self._disposable = disposable
            dispose_now = self._disposed
        if dispose_now:
            disposable.dispose()

    def as_observer(self) -> SubscriptionCallbacks:
        return SubscriptionCallbacks(
            on_next=self.on_next,
            on_error=self.on_error,
            on_completed=self.on_completed,
        )

    def as_disposable(self) -> Disposable:
        return CallbackDisposable(self.dispose)


class SubscriptionObserver:
    """
    Handler created when a subscription is activated.

    Builds the wire query for the subscription (lazily, once) and writes
    every payload to the record store before forwarding it to the user's
    `on_next`.
    """

    def __init__(
        self,
        store: RecordStore,
        subscription: Subscription,
        callbacks: Optional[SubscriptionCallbacks] = None,
    ):
        self.id = next_client_subscription_id()
        self.lifecycle = ObserverLifecycle(self, name=type(subscription).__name__)

        self._store = store
        self._subscription = subscription
        self._callbacks = callbacks

        self._input_variable: Optional[dict[str, Any]] = None
        self._subscription_node: Optional[ConcreteSubscription] = None
        self._configs: Optional[list[UpdateConfig]] = None
        self._query: Optional[SubscriptionQuery] = None

    def get_query(self) -> SubscriptionQuery:
        if self._query is None:
            self._query = build_subscription_query(
                self.get_subscription_node(),
                self.get_input_variable(),
                self.get_configs(),
            )
        return self._query

    def get_input_variable(self) -> dict[str, Any]:
        if self._input_variable is None:
            self._input_variable = {
                **self._subscription.get_variables(),
                CLIENT_SUBSCRIPTION_ID: self.id,
            }
        return self._input_variable

    def get_subscription_node(self) -> ConcreteSubscription:
        if self._subscription_node is None:
            node = self._subscription.get_subscription()
            invariant(
                isinstance(node, ConcreteSubscription),
                "Subscription: Expected `get_subscription` to return a "
                "ConcreteSubscription, got `%s`.",
                type(node).__name__,
            )
            self._subscription_node = node
        return self._subscription_node

    def get_configs(self) -> list[UpdateConfig]:
        if self._configs is None:
            self._configs = parse_configs(self._subscription.get_configs())
        return self._configs

    # === Handler ===

    def next(self, data: Any) -> None:
        query = self.get_query()
        response = data.get("response", data) if isinstance(data, dict) else data
        payload = response.get(query.get_call().name) if isinstance(response, dict) else None

        self._store.handle_update_payload(
            query,
            payload,
            configs=self.get_configs(),
            is_optimistic_update=False,
        )

        if self._callbacks and self._callbacks.on_next:
            self._callbacks.on_next(payload)

    def error(self, error: Any) -> None:
        logger.debug(f"Subscription {self.id} failed: {error}")
        if self._callbacks and self._callbacks.on_error:
            self._callbacks.on_error(error)

    def completed(self) -> None:
        logger.debug(f"Subscription {self.id} completed")
        if self._callbacks and self._callbacks.on_completed:
            self._callbacks.on_completed()

    # === Lifecycle shortcuts ===

    def on_next(self, data: Any) -> None:
        self.lifecycle.on_next(data)

    def on_error(self, error: Any) -> None:
        self.lifecycle.on_error(error)

    def on_completed(self) -> None:
        self.lifecycle.on_completed()

    def dispose(self) -> None:
        self.lifecycle.dispose()

    def set_disposable(self, disposable: Disposable) -> None:
        self.lifecycle.set_disposable(disposable)

    def as_observer(self) -> SubscriptionCallbacks:
        return self.lifecycle.as_observer()

    def as_disposable(self) -> Disposable:
        return self.lifecycle.as_disposable()
