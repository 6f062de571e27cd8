"""
Update-config declarations.

These describe how the record store should be updated after a subscription
payload arrives. Subscriptions declare them with `get_configs()`, either as
model instances or as plain dicts using snake_case or camelCase keys:

    {
        "type": "RANGE_ADD",
        "parentName": "viewer",
        "parentID": "VXNlcjox",
        "connectionName": "todos",
        "edgeName": "todoEdge",
        "rangeBehaviors": {"": "append"},
    }
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import InvariantViolation


class MutationType(str, Enum):
    """Kinds of update configs."""
    RANGE_ADD = "RANGE_ADD"
    NODE_DELETE = "NODE_DELETE"
    RANGE_DELETE = "RANGE_DELETE"
    REQUIRED_CHILDREN = "REQUIRED_CHILDREN"
    FIELDS_CHANGE = "FIELDS_CHANGE"


RangeOperation = Literal["append", "prepend", "ignore", "remove", "refetch"]


class _ConfigBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class RangeAddConfig(_ConfigBase):
    """
    Adds a new edge to a range.

    `parent_name` is the field holding the range, `parent_id` its record id,
    `connection_name` the range, `edge_name` the payload key of the new edge.
    `range_behaviors` maps the printed calls of the connection ("" for none)
    to a range operation.
    """
    type: Literal["RANGE_ADD"] = "RANGE_ADD"
    parent_name: str = Field(alias="parentName")
    parent_id: str = Field(alias="parentID")
    connection_name: str = Field(alias="connectionName")
    edge_name: str = Field(alias="edgeName")
    range_behaviors: dict[str, RangeOperation] = Field(default_factory=dict, alias="rangeBehaviors")


class NodeDeleteConfig(_ConfigBase):
    """Deletes a node and drops its edge from a range."""
    type: Literal["NODE_DELETE"] = "NODE_DELETE"
    parent_name: str = Field(alias="parentName")
    parent_id: str = Field(alias="parentID")
    connection_name: str = Field(alias="connectionName")
    deleted_id_field_name: str = Field(alias="deletedIDFieldName")


class RangeDeleteConfig(_ConfigBase):
    """Drops an edge from a range but keeps the node."""
    type: Literal["RANGE_DELETE"] = "RANGE_DELETE"
    parent_name: str = Field(alias="parentName")
    parent_id: str = Field(alias="parentID")
    connection_name: str = Field(alias="connectionName")
    deleted_id_field_name: str = Field(alias="deletedIDFieldName")
    path_to_connection: list[str] = Field(default_factory=list, alias="pathToConnection")


class RequiredChildrenConfig(_ConfigBase):
    """Only meaningful for mutations, ignored by subscriptions."""
    type: Literal["REQUIRED_CHILDREN"] = "REQUIRED_CHILDREN"
    children: list[Any] = Field(default_factory=list)


class FieldsChangeConfig(_ConfigBase):
    """Only meaningful for mutations, ignored by subscriptions."""
    type: Literal["FIELDS_CHANGE"] = "FIELDS_CHANGE"
    field_ids: dict[str, Any] = Field(default_factory=dict, alias="fieldIDs")


UpdateConfig = Annotated[
    Union[
        RangeAddConfig,
        NodeDeleteConfig,
        RangeDeleteConfig,
        RequiredChildrenConfig,
        FieldsChangeConfig,
    ],
    Field(discriminator="type"),
]

_configs_adapter = TypeAdapter(list[UpdateConfig])


def parse_configs(raw: list[Any]) -> list[UpdateConfig]:
    """
    Validate a list of configs (models or dicts) into config models.

    Order is preserved. Raises InvariantViolation on malformed input.
    """
    if raw is None:
        return []
    try:
        return _configs_adapter.validate_python(
            [c.model_dump(mode="json", by_alias=True) if isinstance(c, BaseModel) else c for c in raw]
        )
    except PydanticValidationError as e:
        raise InvariantViolation(f"Invalid update configs: {e}") from e
