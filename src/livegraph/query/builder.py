"""
Wire query builder for subscriptions.

Subscriptions push one payload per event, so the client has to select every
field the store update will need. `build_subscription_query` appends those
fields to the declared subscription according to its update configs.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from ..core.concrete import ConcreteSubscription
from ..core.configs import MutationType, RangeAddConfig, UpdateConfig
from ..core.errors import invariant
from ..core.nodes import Field, Node, Subscription
from .editor import add_child_field, map_fields

logger = logging.getLogger(__name__)

CLIENT_SUBSCRIPTION_ID = "clientSubscriptionId"
TYPENAME = "__typename"
ROUTE_NAME = "$SubscriptionObserver"


def build_subscription_query(
    node: ConcreteSubscription,
    input: dict[str, Any],
    configs: Sequence[UpdateConfig],
) -> Subscription:
    """
    Build the wire query for a subscription.

    Args:
        node: Declared subscription
        input: Subscription input, including the client subscription id
        configs: Update configs, applied in order

    Returns:
        Subscription node ready to be sent

    Raises:
        InvariantViolation: If a RANGE_ADD edge is not selected
    """
    query = Subscription.create(node, ROUTE_NAME, {"input": input})

    # Every payload must echo the client subscription id.
    next_children: tuple[Node, ...] = query.get_children() + (
        Field.build(CLIENT_SUBSCRIPTION_ID, "String", metadata={"isRequisite": True}),
    )

    for config in configs:
        if config.type == MutationType.RANGE_ADD:
            next_children = _update_edge_field_for_insertion(next_children, config)
        elif config.type in (MutationType.RANGE_DELETE, MutationType.NODE_DELETE):
            next_children = next_children + (
                Field.build(config.deleted_id_field_name, "String"),
            )
        elif config.type == MutationType.REQUIRED_CHILDREN:
            logger.warning(
                "`REQUIRED_CHILDREN` is not applicable to subscriptions, place "
                "any required children in the subscription query itself."
            )
        elif config.type == MutationType.FIELDS_CHANGE:
            logger.warning(
                "`FIELDS_CHANGE` is not applicable to subscriptions, any "
                "fields present in the subscription query will be changed."
            )

    query = query.clone(next_children)
    invariant(
        isinstance(query, Subscription),
        "build_subscription_query(): Expected a subscription.",
    )
    return query


def _update_edge_field_for_insertion(
    children: tuple[Node, ...],
    config: RangeAddConfig,
) -> tuple[Node, ...]:
    """
    Add `__typename` to the edge field named by a RANGE_ADD config.

    The edge may sit directly in the payload or inside a fragment on the
    payload type, e.g. `addTodoSubscribe { ... on Payload { todoEdge } }`.
    """
    found = False

    def add_typename(field: Field) -> Field:
        nonlocal found
        if field.get_schema_name() != config.edge_name:
            return field
        found = True
        return add_child_field(field, Field.build(TYPENAME, "String"))

    next_children = tuple(map_fields(child, add_typename) for child in children)
    invariant(
        found,
        "Subscription query does not contain edge `%s`.",
        config.edge_name,
    )
    return next_children
