"""
Fragment pointers.

A fragment pointer records which record was fetched with which fragment. It
is embedded in application-visible data under reserved keys:

    {
        "__dataID__": "123",
        "__fragments__": {"_Fragment4": "123", "_Fragment9": "123"},
    }

Entries are keyed by fragment invocation (the concrete fragment id), not by
fragment type, so one object can carry pointers for many fragments.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Union

from ..core.errors import invariant
from ..core.nodes import Field, Fragment, Root

if TYPE_CHECKING:
    from ..store.base import RecordStore

DATA_ID = "__dataID__"
FRAGMENTS = "__fragments__"

DataID = str
FragmentProp = Union[DataID, list[DataID]]


def create(data_id: FragmentProp, fragment: Fragment) -> dict[str, Any]:
    """Create a new object holding a pointer for a single fragment."""
    return {
        DATA_ID: data_id,
        FRAGMENTS: {fragment.get_concrete_fragment_id(): data_id},
    }


def add_fragment(obj: dict[str, Any], fragment: Fragment, data_id: FragmentProp) -> None:
    """Add (or overwrite) the pointer for `fragment` on an existing object."""
    fragment_map = obj.get(FRAGMENTS)
    if fragment_map is None:
        fragment_map = obj[FRAGMENTS] = {}
    fragment_map[fragment.get_concrete_fragment_id()] = data_id


def get_pointer(obj: Any, fragment: Fragment) -> Optional[FragmentProp]:
    """Return the record id stored on `obj` for `fragment`, if any."""
    if not isinstance(obj, dict):
        return None
    return (obj.get(FRAGMENTS) or {}).get(fragment.get_concrete_fragment_id())


def create_for_root(store: RecordStore, query: Root) -> Optional[dict[str, Any]]:
    """
    Create a fragment pointer for the single fragment of a root query.

    Returns None when the root call did not resolve to a record, e.g. when it
    was never fetched because its fragment was empty at this point.

    Raises:
        InvariantViolation: For batch calls, field children, or anything
            other than exactly one fragment
    """
    batch_call = query.get_batch_call()
    invariant(
        not batch_call,
        "Queries supplied at the root cannot have batch call variables. Query "
        "`%s` has a batch call variable, `%s`.",
        query.get_name(),
        batch_call,
    )

    fragment: Optional[Fragment] = None
    for child in query.get_children():
        if isinstance(child, Fragment):
            invariant(
                fragment is None,
                "Queries supplied at the root should contain exactly one "
                "fragment (e.g. `${Component.getFragment('...')}`). Query "
                "`%s` contains more than one fragment.",
                query.get_name(),
            )
            fragment = child
        elif isinstance(child, Field):
            invariant(
                child.metadata.get("isGenerated"),
                "Queries supplied at the root should contain exactly one "
                "fragment and no fields. Query `%s` contains a field, `%s`. If "
                "you need to fetch fields, declare them in a container.",
                query.get_name(),
                child.get_schema_name(),
            )

    invariant(
        fragment is not None,
        "Queries supplied at the root should contain exactly one fragment. "
        "Query `%s` contains none.",
        query.get_name(),
    )

    data_id = store.resolve_root_id(query)
    if data_id is None:
        return None
    return create(data_id, fragment)
