"""
Query tree editing helpers.

Pure functions over immutable nodes. Only the nodes on a changed path are
rebuilt; everything else is returned as is so shared subtrees stay shared.
"""

from __future__ import annotations

from typing import Callable

from ..core.errors import invariant
from ..core.nodes import Field, Fragment, Node

FieldMapper = Callable[[Field], Field]


def map_fields(node: Node, fn: FieldMapper) -> Node:
    """
    Apply `fn` to a field, or to every field reachable through a fragment.

    Fragments are transparent: their children are walked and the fragment is
    cloned only if at least one child changed.
    """
    if isinstance(node, Field):
        return fn(node)
    if isinstance(node, Fragment):
        new_fragment = node.clone(map_fields(child, fn) for child in node.get_children())
        invariant(
            isinstance(new_fragment, Fragment),
            "map_fields(): Expected a fragment.",
        )
        return new_fragment
    invariant(False, "map_fields(): Expected a field or a fragment.")


def add_child_field(parent: Field, child: Field) -> Field:
    """Return a clone of `parent` with `child` appended to its children."""
    new_field = parent.clone(parent.get_children() + (child,))
    invariant(
        isinstance(new_field, Field),
        "add_child_field(): Expected a field.",
    )
    return new_field
