"""
Declarative (concrete) query descriptions.

These are the plain, serializable descriptions from which query tree nodes
are built. Application code writes them directly:

    ConcreteSubscription(
        name="AddTodoSubscription",
        call_name="addTodoSubscribe",
        input_type="AddTodoSubscribeInput!",
        children=[
            ConcreteField(field_name="todoEdge", type="TodoEdge", children=[
                ConcreteField(field_name="node", type="Todo", children=[
                    ConcreteField(field_name="id", type="ID"),
                    ConcreteField(field_name="text", type="String"),
                ]),
            ]),
        ],
    )
"""

from __future__ import annotations

import itertools
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field

_fragment_ids = itertools.count()


def _next_fragment_id() -> str:
    return f"_Fragment{next(_fragment_ids)}"


class ConcreteCall(BaseModel):
    """Argument passed to a field, e.g. `first: 10`."""
    name: str
    value: Any = None


class ConcreteField(BaseModel):
    kind: Literal["field"] = "field"
    field_name: str
    type: str = "String"
    alias: Optional[str] = None
    calls: list[ConcreteCall] = Field(default_factory=list)
    children: list[ConcreteSelection] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class ConcreteFragment(BaseModel):
    """
    Fragment on a type.

    `id` identifies this fragment invocation. Two fragments with the same
    type and selections still get distinct ids.
    """
    kind: Literal["fragment"] = "fragment"
    id: str = Field(default_factory=_next_fragment_id)
    name: str = "Fragment"
    type: str
    plural: bool = False
    children: list[ConcreteSelection] = Field(default_factory=list)


ConcreteSelection = Annotated[
    Union[ConcreteField, ConcreteFragment],
    Field(discriminator="kind"),
]


class ConcreteSubscription(BaseModel):
    kind: Literal["subscription"] = "subscription"
    name: str
    call_name: str
    input_type: str = "String"
    children: list[ConcreteSelection] = Field(default_factory=list)


class ConcreteQuery(BaseModel):
    """
    Root query such as `node(id: "123") { ...F }`.

    `batch_call` names a deferred ref variable (e.g. "ref_q0") whose value is
    only known after another query ran.
    """
    kind: Literal["query"] = "query"
    name: str
    field_name: str
    call_name: Optional[str] = None
    call_value: Any = None
    batch_call: Optional[str] = None
    children: list[ConcreteSelection] = Field(default_factory=list)


ConcreteField.model_rebuild()
ConcreteFragment.model_rebuild()
