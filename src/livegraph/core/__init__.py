"""
Core module - errors, update configs, query tree nodes, and configuration.
"""

from __future__ import annotations

from .concrete import (
    ConcreteCall,
    ConcreteField,
    ConcreteFragment,
    ConcreteQuery,
    ConcreteSubscription,
)
from .config import LivegraphConfig, load_config
from .configs import (
    FieldsChangeConfig,
    MutationType,
    NodeDeleteConfig,
    RangeAddConfig,
    RangeDeleteConfig,
    RequiredChildrenConfig,
    UpdateConfig,
    parse_configs,
)
from .errors import (
    ConfigError,
    InvariantViolation,
    LivegraphError,
    TransportError,
    invariant,
)
from .nodes import Call, Field, Fragment, Node, Root, Subscription
from .printer import print_query

__all__ = [
    # Concrete descriptions
    "ConcreteCall",
    "ConcreteField",
    "ConcreteFragment",
    "ConcreteQuery",
    "ConcreteSubscription",
    # Config
    "LivegraphConfig",
    "load_config",
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
    "invariant",
    # Nodes
    "Node",
    "Call",
    "Field",
    "Fragment",
    "Subscription",
    "Root",
    "print_query",
]
