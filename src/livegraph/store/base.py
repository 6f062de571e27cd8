"""
Record store interface.

The subscription core only talks to the store through this protocol.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, Union

from ..core.configs import UpdateConfig
from ..core.nodes import Fragment, Root, Subscription

DataID = str


class RecordStore(Protocol):
    """Normalized record store used by subscriptions."""

    def resolve_root_id(self, root: Root) -> Optional[Union[DataID, list[DataID]]]:
        """Record id (or ids) a root call points to, None if unknown."""
        ...

    def read(self, fragment: Fragment, data_id: DataID) -> Optional[dict[str, Any]]:
        """Read the fields of `fragment` for one record."""
        ...

    def read_all(self, fragment: Fragment, data_ids: Sequence[DataID]) -> list[Optional[dict[str, Any]]]:
        """Read the fields of `fragment` for several records."""
        ...

    def handle_update_payload(
        self,
        query: Subscription,
        payload: dict[str, Any],
        *,
        configs: Sequence[UpdateConfig],
        is_optimistic_update: bool,
    ) -> None:
        """Write a payload into the store, applying update configs."""
        ...
