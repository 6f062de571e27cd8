"""
Store module - record store interface and in-memory implementation.
"""

from __future__ import annotations

from .base import RecordStore
from .memory import InMemoryRecordStore

__all__ = [
    "RecordStore",
    "InMemoryRecordStore",
]
