"""
livegraph - client-side GraphQL subscriptions backed by a normalized record store.

A subscription declares its query, its input and its update configs. The
client adds the bookkeeping fields those configs need to the wire query,
sends it through a network layer, and writes every pushed payload to the
record store before calling back into the application.

Usage:
    from livegraph import (
        Environment,
        InMemoryRecordStore,
        RedisSubscriptionNetworkLayer,
        SubscriptionCallbacks,
        create_subscription,
        init_redis,
    )

    client = await init_redis("redis://redis:6379")
    environment = Environment(
        store=InMemoryRecordStore(),
        network_layer=RedisSubscriptionNetworkLayer(client),
    )
    disposable = create_subscription(
        environment,
        AddTodoSubscription({"viewer": viewer}, store=environment.store),
        SubscriptionCallbacks(on_next=print),
    )
    ...
    disposable.dispose()
"""

from __future__ import annotations

from .core import (
    Call,
    ConcreteCall,
    ConcreteField,
    ConcreteFragment,
    ConcreteQuery,
    ConcreteSubscription,
    ConfigError,
    FieldsChangeConfig,
    InvariantViolation,
    LivegraphConfig,
    LivegraphError,
    MutationType,
    NodeDeleteConfig,
    RangeAddConfig,
    RangeDeleteConfig,
    RequiredChildrenConfig,
    TransportError,
    UpdateConfig,
    load_config,
    parse_configs,
    print_query,
)
from .network import (
    Disposable,
    NetworkLayer,
    RedisClient,
    RedisSubscriptionNetworkLayer,
    SubscriptionCallbacks,
    SubscriptionRequest,
    close_redis,
    init_redis,
)
from .query import FragmentReference, build_subscription_query, fragment_pointer
from .store import InMemoryRecordStore, RecordStore
from .subscription import (
    Environment,
    ObserverLifecycle,
    Subscription,
    SubscriptionObserver,
    create_subscription,
)

__version__ = "0.1.0"

__all__ = [
    # Concrete descriptions
    "Call",
    "ConcreteCall",
    "ConcreteField",
    "ConcreteFragment",
    "ConcreteQuery",
    "ConcreteSubscription",
    "print_query",
    # Update configs
    "MutationType",
    "RangeAddConfig",
    "NodeDeleteConfig",
    "RangeDeleteConfig",
    "RequiredChildrenConfig",
    "FieldsChangeConfig",
    "UpdateConfig",
    "parse_configs",
    # Errors
    "LivegraphError",
    "InvariantViolation",
    "ConfigError",
    "TransportError",
    # Config
    "LivegraphConfig",
    "load_config",
    # Query
    "FragmentReference",
    "build_subscription_query",
    "fragment_pointer",
    # Store
    "RecordStore",
    "InMemoryRecordStore",
    # Network
    "Disposable",
    "NetworkLayer",
    "SubscriptionCallbacks",
    "SubscriptionRequest",
    "RedisClient",
    "RedisSubscriptionNetworkLayer",
    "init_redis",
    "close_redis",
    # Subscriptions
    "Subscription",
    "SubscriptionObserver",
    "ObserverLifecycle",
    "Environment",
    "create_subscription",
]
