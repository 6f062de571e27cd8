"""
Query module - tree editing, subscription query building, fragment pointers.
"""

from __future__ import annotations

from . import fragment_pointer
from .builder import (
    CLIENT_SUBSCRIPTION_ID,
    TYPENAME,
    build_subscription_query,
)
from .editor import add_child_field, map_fields
from .reference import FragmentReference

__all__ = [
    "fragment_pointer",
    "CLIENT_SUBSCRIPTION_ID",
    "TYPENAME",
    "build_subscription_query",
    "add_child_field",
    "map_fields",
    "FragmentReference",
]
