"""
Subscription request handed to transports.
"""

from __future__ import annotations

from typing import Any

from ..core.nodes import Subscription
from ..core.printer import print_query
from ..query.builder import CLIENT_SUBSCRIPTION_ID
from .base import SubscriptionCallbacks


class SubscriptionRequest:
    """
    Wire query plus the observer that receives its events.

    Transports call `on_next` / `on_error` / `on_completed` as events arrive.
    """

    def __init__(self, query: Subscription, observer: SubscriptionCallbacks):
        self._query = query
        self._observer = observer

    def get_query(self) -> Subscription:
        return self._query

    def get_debug_name(self) -> str:
        return self._query.get_name()

    def get_variables(self) -> dict[str, Any]:
        return self._query.get_variables()

    def get_client_subscription_id(self) -> str:
        return self._query.get_variables()["input"][CLIENT_SUBSCRIPTION_ID]

    def get_query_string(self) -> str:
        return print_query(self._query)

    def to_payload(self) -> dict[str, Any]:
        """JSON-serializable form of the request."""
        return {
            "id": self.get_client_subscription_id(),
            "name": self.get_debug_name(),
            "query": self.get_query_string(),
            "variables": self.get_variables(),
        }

    def on_next(self, data: Any) -> None:
        self._observer.on_next(data)

    def on_error(self, error: Any) -> None:
        self._observer.on_error(error)

    def on_completed(self) -> None:
        self._observer.on_completed()
