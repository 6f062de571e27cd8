"""
Subscription activation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..network.base import Disposable, NetworkLayer, SubscriptionCallbacks
from ..network.request import SubscriptionRequest
from ..store.base import RecordStore
from .base import Subscription
from .observer import SubscriptionObserver

logger = logging.getLogger(__name__)


@dataclass
class Environment:
    """Record store and transport shared by the subscriptions of a client."""
    store: RecordStore
    network_layer: NetworkLayer


def create_subscription(
    environment: Environment,
    subscription: Subscription,
    callbacks: Optional[SubscriptionCallbacks] = None,
) -> Disposable:
    """
    Activate a subscription by sending it to the network layer.

    A transport failure while sending is delivered to `callbacks.on_error`;
    the caller still gets a disposable.

    Returns:
        Disposable that stops the subscription and releases its transport
        resource
    """
    observer = SubscriptionObserver(environment.store, subscription, callbacks)
    request = SubscriptionRequest(observer.get_query(), observer.as_observer())

    try:
        disposable = environment.network_layer.send_subscription(request)
    except Exception as e:
        logger.error(f"Failed to send subscription {observer.id} ({request.get_debug_name()}): {e}", exc_info=True)
        observer.on_error(e)
    else:
        # Released by the observer on dispose, error, or completion
        observer.set_disposable(disposable)
        logger.debug(f"Subscription {observer.id} ({request.get_debug_name()}) sent")

    return observer.as_disposable()
