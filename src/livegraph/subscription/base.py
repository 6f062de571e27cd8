"""
Subscription - base class for declaring subscriptions to server events.

Usage:
    class AddTodoSubscription(Subscription):
        fragments = {
            "viewer": lambda variables: ConcreteFragment(
                type="User",
                children=[ConcreteField(field_name="id", type="ID")],
            ),
        }

        def get_subscription(self):
            return ConcreteSubscription(
                name="AddTodoSubscription",
                call_name="addTodoSubscribe",
                children=[ConcreteField(field_name="todoEdge", type="TodoEdge", children=[...])],
            )

        def get_configs(self):
            return [{
                "type": "RANGE_ADD",
                "parentName": "viewer",
                "parentID": self.props["viewer"]["id"],
                "connectionName": "todos",
                "edgeName": "todoEdge",
                "rangeBehaviors": {"": "append"},
            }]

        def get_variables(self):
            return {}
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Optional

from ..core.concrete import ConcreteFragment, ConcreteSubscription
from ..core.configs import UpdateConfig
from ..core.errors import invariant
from ..core.nodes import Fragment
from ..query import fragment_pointer
from ..query.reference import FragmentReference, PrepareVariables
from ..store.base import RecordStore

logger = logging.getLogger(__name__)

Variables = dict[str, Any]
FragmentBuilder = Callable[[Variables], ConcreteFragment]

_built_fragments: dict[tuple[type, str, str], ConcreteFragment] = {}


class Subscription(ABC):
    """
    Base class for subscriptions.

    Subclasses declare the subscription query, its update configs and its
    input variables. Props whose names match `fragments` are resolved from
    fragment pointers into data read from the record store.
    """

    fragments: ClassVar[dict[str, FragmentBuilder]] = {}
    initial_variables: ClassVar[Variables] = {}
    prepare_variables: ClassVar[Optional[PrepareVariables]] = None

    def __init__(self, props: Optional[dict[str, Any]] = None, store: Optional[RecordStore] = None):
        self._did_show_fake_data_warning = False
        self._store = store
        self.props = self._resolve_props(dict(props or {}))

    @abstractmethod
    def get_subscription(self) -> ConcreteSubscription:
        """The subscription query, e.g. `subscription { addTodoSubscribe { ... } }`."""

    @abstractmethod
    def get_configs(self) -> list[UpdateConfig | dict[str, Any]]:
        """
        Update configs describing how payloads are written to the store.

        RANGE_ADD adds the edge named `edge_name` to the range
        `connection_name` of record `parent_id`. NODE_DELETE removes the record
        whose id is in `deleted_id_field_name` and drops it from the range.
        RANGE_DELETE only drops it from the range.
        """

    @abstractmethod
    def get_variables(self) -> Variables:
        """Input of the subscription sent to the server."""

    def _resolve_props(self, props: dict[str, Any]) -> dict[str, Any]:
        name = type(self).__name__
        resolved = dict(props)

        for fragment_name, builder in self.fragments.items():
            if fragment_name not in props:
                logger.warning(
                    f"Subscription: Expected data for fragment `{fragment_name}` to be "
                    f"supplied to `{name}` as a prop. Pass an explicit `None` if this "
                    f"is intentional."
                )
                continue

            prop_value = props[fragment_name]
            if not prop_value:
                continue

            fragment = Fragment.create(
                build_subscription_fragment(type(self), fragment_name, builder, self.initial_variables)
            )

            if fragment.is_plural():
                invariant(
                    isinstance(prop_value, list),
                    "Subscription: Invalid prop `%s` supplied to `%s`, expected a "
                    "list of records because the corresponding fragment is plural.",
                    fragment_name,
                    name,
                )
                data_ids = []
                for index, item in enumerate(prop_value):
                    pointer = fragment_pointer.get_pointer(item, fragment)
                    invariant(
                        pointer is not None,
                        "Subscription: Invalid prop `%s` supplied to `%s`, expected "
                        "element at index %s to have query data.",
                        fragment_name,
                        name,
                        index,
                    )
                    data_ids.extend(pointer if isinstance(pointer, list) else [pointer])
                resolved[fragment_name] = self._require_store(fragment_name).read_all(fragment, data_ids)
            else:
                invariant(
                    not isinstance(prop_value, list),
                    "Subscription: Invalid prop `%s` supplied to `%s`, expected a "
                    "single record because the corresponding fragment is not plural.",
                    fragment_name,
                    name,
                )
                pointer = fragment_pointer.get_pointer(prop_value, fragment)
                if pointer is not None:
                    resolved[fragment_name] = self._require_store(fragment_name).read(fragment, pointer)
                elif not self._did_show_fake_data_warning:
                    self._did_show_fake_data_warning = True
                    logger.warning(
                        f"Subscription: Expected prop `{fragment_name}` supplied to "
                        f"`{name}` to be data fetched from the store. This is likely "
                        f"an error unless you are purposely passing in mock data that "
                        f"conforms to the shape of this subscription's fragment."
                    )

        return resolved

    def _require_store(self, fragment_name: str) -> RecordStore:
        invariant(
            self._store is not None,
            "Subscription: `%s` needs a record store to resolve prop `%s`.",
            type(self).__name__,
            fragment_name,
        )
        return self._store

    @classmethod
    def get_fragment(
        cls,
        fragment_name: str,
        variable_mapping: Optional[dict[str, str]] = None,
    ) -> FragmentReference:
        """Reference to one of this subscription's fragments, for composing into a parent query."""
        builder = cls.fragments.get(fragment_name)
        if builder is None:
            invariant(
                False,
                "%s.get_fragment(): `%s` is not a valid fragment name. Available "
                "fragments names: %s",
                cls.__name__,
                fragment_name,
                ", ".join(f"`{name}`" for name in cls.fragments),
            )

        initial_variables = cls.initial_variables or {}
        return FragmentReference.create_for_container(
            lambda: build_subscription_fragment(cls, fragment_name, builder, initial_variables),
            initial_variables,
            variable_mapping,
            cls.prepare_variables,
        )


def build_subscription_fragment(
    subscription_class: type,
    fragment_name: str,
    builder: FragmentBuilder,
    variables: Variables,
) -> ConcreteFragment:
    """
    Build a declared fragment, with contextual errors.

    Results are memoized per subscription class, fragment name and variables,
    so every caller sees the same fragment identity.
    """
    key = (subscription_class, fragment_name, json.dumps(variables, sort_keys=True, default=str))
    fragment = _built_fragments.get(key)
    if fragment is None:
        fragment = builder(variables)
        invariant(
            isinstance(fragment, ConcreteFragment),
            "Fragment defined on subscription `%s` named `%s` is not a valid "
            "fragment. A typical fragment is defined using: "
            "ConcreteFragment(type=..., children=[...])",
            subscription_class.__name__,
            fragment_name,
        )
        _built_fragments[key] = fragment
    return fragment
