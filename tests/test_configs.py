"""Tests for ``livegraph.core.configs``."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from livegraph.core import (
    FieldsChangeConfig,
    InvariantViolation,
    MutationType,
    NodeDeleteConfig,
    RangeAddConfig,
    RangeDeleteConfig,
    RequiredChildrenConfig,
    parse_configs,
)


class TestParseConfigs:
    def test_camel_case_dicts(self):
        configs = parse_configs([
            {
                "type": "RANGE_ADD",
                "parentName": "viewer",
                "parentID": "1",
                "connectionName": "todos",
                "edgeName": "todoEdge",
                "rangeBehaviors": {"": "append", "status(done)": "ignore"},
            },
            {
                "type": "NODE_DELETE",
                "parentName": "viewer",
                "parentID": "1",
                "connectionName": "todos",
                "deletedIDFieldName": "deletedTodoId",
            },
        ])

        range_add, node_delete = configs
        assert isinstance(range_add, RangeAddConfig)
        assert range_add.edge_name == "todoEdge"
        assert range_add.range_behaviors == {"": "append", "status(done)": "ignore"}
        assert isinstance(node_delete, NodeDeleteConfig)
        assert node_delete.deleted_id_field_name == "deletedTodoId"

    def test_snake_case_dicts(self):
        [config] = parse_configs([{
            "type": "RANGE_DELETE",
            "parent_name": "viewer",
            "parent_id": "1",
            "connection_name": "todos",
            "deleted_id_field_name": "removedTodoId",
            "path_to_connection": ["viewer", "todos"],
        }])
        assert isinstance(config, RangeDeleteConfig)
        assert config.path_to_connection == ["viewer", "todos"]

    def test_models_and_order_are_kept(self):
        raw = [
            FieldsChangeConfig(field_ids={"viewer": "1"}),
            RequiredChildrenConfig(),
            {"type": "REQUIRED_CHILDREN", "children": []},
        ]
        configs = parse_configs(raw)
        assert [c.type for c in configs] == [
            MutationType.FIELDS_CHANGE,
            MutationType.REQUIRED_CHILDREN,
            MutationType.REQUIRED_CHILDREN,
        ]
        assert configs[0].field_ids == {"viewer": "1"}

    def test_none_is_empty(self):
        assert parse_configs(None) == []

    @pytest.mark.parametrize("raw", [
        [{"type": "UNKNOWN"}],
        [{"type": "RANGE_ADD", "parentName": "viewer"}],
        [{
            "type": "RANGE_ADD",
            "parentName": "viewer",
            "parentID": "1",
            "connectionName": "todos",
            "edgeName": "todoEdge",
            "rangeBehaviors": {"": "shuffle"},
        }],
    ])
    def test_invalid_configs_fail(self, raw):
        with pytest.raises(InvariantViolation, match="Invalid update configs"):
            parse_configs(raw)


def test_configs_are_frozen():
    config = RequiredChildrenConfig()
    with pytest.raises(ValidationError):
        config.children = [1]
