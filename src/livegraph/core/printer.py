"""
Query printer - renders query tree nodes as GraphQL text for transports.

Fragments are printed inline (`... on Type { ... }`), so the output needs no
separate fragment definitions.
"""

from __future__ import annotations

import json
from typing import Any

from .errors import invariant
from .nodes import Call, Field, Fragment, Node, Root, Subscription


def print_query(node: Node) -> str:
    """
    Print a subscription or root query node.

    Example:
        subscription AddTodoSubscription($input: AddTodoSubscribeInput!) {
          addTodoSubscribe(input: $input) { clientSubscriptionId }
        }
    """
    if isinstance(node, Subscription):
        call = node.get_call()
        return (
            f"subscription {node.get_name()}($input: {node.input_type}) "
            f"{{ {call.name}(input: $input){_print_children(node)} }}"
        )
    if isinstance(node, Root):
        call = node.get_call()
        args = f"({_print_call(call)})" if call else ""
        return f"query {node.get_name()} {{ {node.get_field_name()}{args}{_print_children(node)} }}"
    invariant(False, "print_query(): Expected a subscription or a root query.")


def _print_children(node: Node) -> str:
    children = node.get_children()
    if not children:
        return ""
    return " { " + " ".join(_print_node(child) for child in children) + " }"


def _print_node(node: Node) -> str:
    if isinstance(node, Field):
        prefix = f"{node.alias}: " if node.alias else ""
        args = ""
        if node.get_calls():
            args = "(" + ", ".join(_print_call(c) for c in node.get_calls()) + ")"
        return f"{prefix}{node.get_schema_name()}{args}{_print_children(node)}"
    if isinstance(node, Fragment):
        return f"... on {node.get_type()}{_print_children(node)}"
    invariant(False, "print_query(): Unexpected node `%s`.", type(node).__name__)


def _print_call(call: Call) -> str:
    return f"{call.name}: {_print_value(call.value)}"


def _print_value(value: Any) -> str:
    if isinstance(value, dict):
        items = ", ".join(f"{k}: {_print_value(v)}" for k, v in value.items())
        return "{" + items + "}"
    if isinstance(value, list):
        return "[" + ", ".join(_print_value(v) for v in value) + "]"
    return json.dumps(value)
