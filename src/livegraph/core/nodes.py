"""
Immutable query tree nodes.

Nodes are built from concrete descriptions (see `concrete.py`) and are never
mutated. Rewrites go through `clone(children)`, which returns a new node of
the same class and leaves the original (and every parent sharing it) as is.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Optional

from .concrete import (
    ConcreteField,
    ConcreteFragment,
    ConcreteQuery,
    ConcreteSubscription,
)
from .errors import invariant


@dataclass(frozen=True)
class Call:
    """A field argument, e.g. `id: "123"`."""
    name: str
    value: Any = None


@dataclass(frozen=True, eq=False)
class Node:
    """Base class for all query tree nodes."""
    children: tuple[Node, ...] = ()

    def get_children(self) -> tuple[Node, ...]:
        return self.children

    def clone(self, children: Iterable[Node]) -> Node:
        """
        Return a node of the same class with new children.

        Returns `self` when the children are the same objects in the same
        order, so untouched subtrees stay shared.
        """
        children = tuple(children)
        if len(children) == len(self.children) and all(
            a is b for a, b in zip(children, self.children)
        ):
            return self
        return replace(self, children=children)


@dataclass(frozen=True, eq=False)
class Field(Node):
    field_name: str = ""
    type: str = "String"
    alias: Optional[str] = None
    calls: tuple[Call, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        field_name: str,
        type: str = "String",
        metadata: Optional[dict[str, Any]] = None,
        children: Iterable[Node] = (),
        calls: Iterable[Call] = (),
    ) -> Field:
        """Build a synthetic field, e.g. `Field.build("__typename")`."""
        return cls(
            children=tuple(children),
            field_name=field_name,
            type=type,
            calls=tuple(calls),
            metadata=dict(metadata or {}),
        )

    @classmethod
    def create(cls, concrete: ConcreteField) -> Field:
        return cls(
            children=_create_children(concrete.children),
            field_name=concrete.field_name,
            type=concrete.type,
            alias=concrete.alias,
            calls=tuple(Call(c.name, c.value) for c in concrete.calls),
            metadata=dict(concrete.metadata),
        )

    def get_schema_name(self) -> str:
        return self.field_name

    def get_serialization_key(self) -> str:
        return self.alias or self.field_name

    def get_type(self) -> str:
        return self.type

    def get_calls(self) -> tuple[Call, ...]:
        return self.calls

    def is_requisite(self) -> bool:
        return bool(self.metadata.get("isRequisite"))


@dataclass(frozen=True, eq=False)
class Fragment(Node):
    fragment_id: str = ""
    name: str = "Fragment"
    type: str = ""
    plural: bool = False

    @classmethod
    def create(cls, concrete: ConcreteFragment) -> Fragment:
        return cls(
            children=_create_children(concrete.children),
            fragment_id=concrete.id,
            name=concrete.name,
            type=concrete.type,
            plural=concrete.plural,
        )

    def get_concrete_fragment_id(self) -> str:
        return self.fragment_id

    def get_debug_name(self) -> str:
        return self.name

    def get_type(self) -> str:
        return self.type

    def is_plural(self) -> bool:
        return self.plural


@dataclass(frozen=True, eq=False)
class Subscription(Node):
    name: str = ""
    call: Call = Call("")
    input_type: str = "String"
    route_name: str = ""
    variables: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        concrete: ConcreteSubscription,
        route_name: str,
        variables: dict[str, Any],
    ) -> Subscription:
        """
        Build a subscription node bound to its variables.

        `variables` must hold the subscription input under "input".
        """
        invariant(
            "input" in variables,
            "Subscription.create(): Expected an `input` variable for `%s`.",
            concrete.name,
        )
        return cls(
            children=_create_children(concrete.children),
            name=concrete.name,
            call=Call(concrete.call_name, variables["input"]),
            input_type=concrete.input_type,
            route_name=route_name,
            variables=dict(variables),
        )

    def get_name(self) -> str:
        return self.name

    def get_call(self) -> Call:
        return self.call

    def get_schema_name(self) -> str:
        return self.call.name

    def get_variables(self) -> dict[str, Any]:
        return self.variables


@dataclass(frozen=True, eq=False)
class Root(Node):
    name: str = ""
    field_name: str = ""
    call: Optional[Call] = None
    batch_call: Optional[str] = None
    route_name: str = ""

    @classmethod
    def create(cls, concrete: ConcreteQuery, route_name: str = "$livegraph") -> Root:
        call = None
        if concrete.call_name is not None:
            call = Call(concrete.call_name, concrete.call_value)
        return cls(
            children=_create_children(concrete.children),
            name=concrete.name,
            field_name=concrete.field_name,
            call=call,
            batch_call=concrete.batch_call,
            route_name=route_name,
        )

    def get_name(self) -> str:
        return self.name

    def get_field_name(self) -> str:
        return self.field_name

    def get_schema_name(self) -> str:
        return self.field_name

    def get_call(self) -> Optional[Call]:
        return self.call

    def get_batch_call(self) -> Optional[str]:
        return self.batch_call


def _create_children(children) -> tuple[Node, ...]:
    nodes = []
    for child in children:
        if isinstance(child, ConcreteFragment):
            nodes.append(Fragment.create(child))
        else:
            nodes.append(Field.create(child))
    return tuple(nodes)
