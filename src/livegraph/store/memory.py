"""
In-memory normalized record store.

Objects carrying an `id` are normalized into records keyed by that id; nested
records are replaced by links (`{"__dataID__": id}`). Connection ranges are
kept as ordered lists of node ids per (parent id, connection name, calls).

Usage:
    store = InMemoryRecordStore()
    store.set_root_call("viewer", None, "VXNlcjox")
    store.put("VXNlcjox", {"id": "VXNlcjox", "name": "Ann"})

    pointer = create_for_root(store, root_query)
    data = store.read(fragment, "VXNlcjox")
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence, Union

from ..core.configs import (
    MutationType,
    NodeDeleteConfig,
    RangeAddConfig,
    RangeDeleteConfig,
    UpdateConfig,
)
from ..core.nodes import Field, Fragment, Node, Root, Subscription
from ..query.fragment_pointer import DATA_ID, add_fragment

logger = logging.getLogger(__name__)

DataID = str
RangeKey = tuple[DataID, str, str]


class InMemoryRecordStore:
    """
    Dict-backed record store.

    Optimistic writes go to a separate layer that overlays base records and
    ranges on read and is dropped with `clear_optimistic()`. Optimistic
    deletes only mask base records.
    """

    def __init__(self, records: Optional[dict[DataID, dict[str, Any]]] = None):
        self._records: dict[DataID, dict[str, Any]] = dict(records or {})
        self._root_calls: dict[tuple[str, Any], Union[DataID, list[DataID]]] = {}
        self._ranges: dict[RangeKey, list[DataID]] = {}

        self._optimistic: dict[DataID, dict[str, Any]] = {}
        self._optimistic_deleted: set[DataID] = set()
        # None marks a range forgotten by an optimistic refetch
        self._optimistic_ranges: dict[RangeKey, Optional[list[DataID]]] = {}

    # === Records ===

    def put(self, data_id: DataID, record: dict[str, Any]) -> None:
        """Store a record as is (no normalization)."""
        self._records[data_id] = dict(record)

    def get(self, data_id: DataID) -> Optional[dict[str, Any]]:
        """Get a record, with optimistic fields applied."""
        if data_id in self._optimistic_deleted:
            return None
        base = self._records.get(data_id)
        optimistic = self._optimistic.get(data_id)
        if base is None and optimistic is None:
            return None
        return {**(base or {}), **(optimistic or {})}

    def has(self, data_id: DataID) -> bool:
        if data_id in self._optimistic_deleted:
            return False
        return data_id in self._records or data_id in self._optimistic

    def clear_optimistic(self) -> None:
        self._optimistic.clear()
        self._optimistic_deleted.clear()
        self._optimistic_ranges.clear()

    # === Root calls ===

    def set_root_call(self, field_name: str, value: Any, data_id: Union[DataID, list[DataID]]) -> None:
        """Remember which record a root call (e.g. `viewer`, `username("foo")`) points to."""
        self._root_calls[(field_name, _hashable(value))] = data_id

    def resolve_root_id(self, root: Root) -> Optional[Union[DataID, list[DataID]]]:
        call = root.get_call()
        if call is not None and call.name == "id":
            return call.value
        value = call.value if call is not None else None
        return self._root_calls.get((root.get_field_name(), _hashable(value)))

    # === Ranges ===

    def set_range(self, parent_id: DataID, connection_name: str, node_ids: Sequence[DataID], calls: str = "") -> None:
        self._ranges[(parent_id, connection_name, calls)] = list(node_ids)

    def get_range(self, parent_id: DataID, connection_name: str, calls: str = "") -> Optional[list[DataID]]:
        key = (parent_id, connection_name, calls)
        if key in self._optimistic_ranges:
            node_ids = self._optimistic_ranges[key]
        else:
            node_ids = self._ranges.get(key)
        return list(node_ids) if node_ids is not None else None

    def _writable_range(self, key: RangeKey, optimistic: bool) -> list[DataID]:
        if not optimistic:
            return self._ranges.setdefault(key, [])
        node_ids = self._optimistic_ranges.get(key)
        if node_ids is None:
            if key in self._optimistic_ranges:
                node_ids = []
            else:
                node_ids = list(self._ranges.get(key, []))
            self._optimistic_ranges[key] = node_ids
        return node_ids

    def _forget_range(self, key: RangeKey, optimistic: bool) -> None:
        if optimistic:
            self._optimistic_ranges[key] = None
        else:
            self._ranges.pop(key, None)

    # === Reads ===

    def read(self, fragment: Fragment, data_id: DataID) -> Optional[dict[str, Any]]:
        """Read the fields selected by `fragment` from one record."""
        return self._read_selection(fragment, data_id)

    def read_all(self, fragment: Fragment, data_ids: Sequence[DataID]) -> list[Optional[dict[str, Any]]]:
        return [self._read_selection(fragment, data_id) for data_id in data_ids]

    def _read_selection(self, node: Node, data_id: DataID) -> Optional[dict[str, Any]]:
        record = self.get(data_id)
        if record is None:
            return None

        result: dict[str, Any] = {DATA_ID: data_id}
        for child in node.get_children():
            if isinstance(child, Fragment):
                # Nested fragments are read by their own owner
                add_fragment(result, child, data_id)
            elif isinstance(child, Field):
                if child.get_schema_name() in record:
                    result[child.get_serialization_key()] = self._read_value(
                        child, record[child.get_schema_name()]
                    )
        return result

    def _read_value(self, field: Field, value: Any) -> Any:
        if isinstance(value, list):
            return [self._read_value(field, item) for item in value]
        if isinstance(value, dict) and DATA_ID in value:
            if not field.get_children():
                return value[DATA_ID]
            return self._read_selection(field, value[DATA_ID])
        return value

    # === Writes ===

    def handle_update_payload(
        self,
        query: Subscription,
        payload: dict[str, Any],
        *,
        configs: Sequence[UpdateConfig],
        is_optimistic_update: bool,
    ) -> None:
        """
        Write a subscription payload and apply its update configs.

        Fields are stored under their schema names, so aliased fields in the
        query are read back through any selection of the same field.

        Args:
            query: Wire query the payload answers
            payload: Payload for the query's call
            configs: Update configs of the subscription
            is_optimistic_update: Write to the optimistic layer instead
        """
        if payload is None:
            logger.warning(f"Empty payload for `{query.get_call().name}`, nothing to write")
            return

        self._normalize(payload, query, is_optimistic_update)

        for config in configs:
            if config.type == MutationType.RANGE_ADD:
                self._apply_range_add(config, payload, is_optimistic_update)
            elif config.type == MutationType.NODE_DELETE:
                self._apply_delete(config, payload, is_optimistic_update, delete_node=True)
            elif config.type == MutationType.RANGE_DELETE:
                self._apply_delete(config, payload, is_optimistic_update, delete_node=False)

        logger.debug(
            f"Applied payload for `{query.get_call().name}` "
            f"({len(configs)} configs, optimistic={is_optimistic_update})"
        )

    def _normalize(self, value: Any, selection: Optional[Node], optimistic: bool) -> Any:
        """Write records found in `value` and return it with records replaced by links."""
        if isinstance(value, list):
            return [self._normalize(item, selection, optimistic) for item in value]
        if not isinstance(value, dict):
            return value

        selected = _selected_fields(selection) if selection is not None else {}
        fields = {}
        for key, item in value.items():
            field = selected.get(key)
            if field is None:
                fields[key] = self._normalize(item, None, optimistic)
            else:
                fields[field.get_schema_name()] = self._normalize(item, field, optimistic)

        data_id = value.get("id")
        if not isinstance(data_id, str):
            return fields

        if optimistic:
            self._optimistic_deleted.discard(data_id)
            target = self._optimistic
        else:
            target = self._records
        target.setdefault(data_id, {}).update(fields)
        return {DATA_ID: data_id}

    def _apply_range_add(self, config: RangeAddConfig, payload: dict[str, Any], optimistic: bool) -> None:
        edge = payload.get(config.edge_name)
        node = edge.get("node") if isinstance(edge, dict) else None
        node_id = node.get("id") if isinstance(node, dict) else None
        if node_id is None:
            logger.warning(f"Payload has no node id under edge `{config.edge_name}`, range not updated")
            return

        behaviors = config.range_behaviors or {"": "append"}
        for calls, operation in behaviors.items():
            key = (config.parent_id, config.connection_name, calls)
            if operation == "refetch":
                # Forget the range so the next read fetches it again
                self._forget_range(key, optimistic)
                continue
            if operation == "ignore":
                continue

            node_ids = self._writable_range(key, optimistic)
            if operation in ("append", "prepend"):
                if node_id in node_ids:
                    continue
                if operation == "append":
                    node_ids.append(node_id)
                else:
                    node_ids.insert(0, node_id)
            elif operation == "remove":
                if node_id in node_ids:
                    node_ids.remove(node_id)

    def _apply_delete(
        self,
        config: Union[NodeDeleteConfig, RangeDeleteConfig],
        payload: dict[str, Any],
        optimistic: bool,
        delete_node: bool,
    ) -> None:
        deleted_id = payload.get(config.deleted_id_field_name)
        if deleted_id is None:
            logger.warning(
                f"Payload has no `{config.deleted_id_field_name}`, nothing deleted"
            )
            return

        keys = set(self._ranges)
        if optimistic:
            keys.update(key for key, node_ids in self._optimistic_ranges.items() if node_ids is not None)
        for key in keys:
            parent_id, connection_name, _calls = key
            if parent_id != config.parent_id or connection_name != config.connection_name:
                continue
            if optimistic:
                if deleted_id in (self.get_range(*key) or []):
                    self._writable_range(key, optimistic).remove(deleted_id)
            elif deleted_id in self._ranges[key]:
                self._ranges[key].remove(deleted_id)

        if delete_node:
            if optimistic:
                self._optimistic.pop(deleted_id, None)
                self._optimistic_deleted.add(deleted_id)
            else:
                self._records.pop(deleted_id, None)
                self._optimistic.pop(deleted_id, None)


def _selected_fields(node: Node) -> dict[str, Field]:
    """Fields selected by `node` keyed by the name they have in a response, through fragments."""
    fields: dict[str, Field] = {}
    for child in node.get_children():
        if isinstance(child, Fragment):
            fields.update(_selected_fields(child))
        elif isinstance(child, Field):
            fields[child.get_serialization_key()] = child
    return fields


def _hashable(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(_hashable(v) for v in value)
    if isinstance(value, dict):
        return tuple(sorted((k, _hashable(v)) for k, v in value.items()))
    return value
