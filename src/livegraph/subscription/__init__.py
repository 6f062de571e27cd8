"""
Subscription module - declaring, observing and activating subscriptions.

Provides:
- Subscription: base class for application subscriptions
- ObserverLifecycle / SubscriptionObserver: event handling and disposal
- create_subscription: sends a subscription through an Environment
"""

from __future__ import annotations

from .base import Subscription, build_subscription_fragment
from .create import Environment, create_subscription
from .ids import (
    ClientSubscriptionIdGenerator,
    base62,
    next_client_subscription_id,
    set_id_generator,
)
from .observer import ObserverHandler, ObserverLifecycle, SubscriptionObserver

__all__ = [
    # Declaration
    "Subscription",
    "build_subscription_fragment",
    # Activation
    "Environment",
    "create_subscription",
    # Ids
    "ClientSubscriptionIdGenerator",
    "base62",
    "next_client_subscription_id",
    "set_id_generator",
    # Observers
    "ObserverHandler",
    "ObserverLifecycle",
    "SubscriptionObserver",
]
