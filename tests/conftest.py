"""
Shared pytest fixtures for livegraph tests.

Provides:
- Deterministic client subscription ids
- An in-memory record store
- A fake network layer recording sent requests
"""

from __future__ import annotations

import pytest

from livegraph.store import InMemoryRecordStore
from livegraph.subscription import ClientSubscriptionIdGenerator, set_id_generator

from support import FakeNetworkLayer


@pytest.fixture(autouse=True)
def deterministic_ids():
    """Start client subscription ids at 0 for every test."""
    previous = set_id_generator(ClientSubscriptionIdGenerator())
    yield
    set_id_generator(previous)


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def network():
    return FakeNetworkLayer()
