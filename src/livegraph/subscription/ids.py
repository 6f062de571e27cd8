"""
Client subscription ids.

Ids are base-62 renderings of a process-wide monotonic counter. They
correlate transport events with observers and are sent as part of every
subscription input.
"""

from __future__ import annotations

import itertools
import threading

BASE62_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"


def base62(number: int) -> str:
    """Render a non-negative integer in base 62."""
    if number < 0:
        raise ValueError(f"base62() expects a non-negative integer, got {number}")
    if number == 0:
        return BASE62_ALPHABET[0]
    digits = []
    while number:
        number, remainder = divmod(number, 62)
        digits.append(BASE62_ALPHABET[remainder])
    return "".join(reversed(digits))


class ClientSubscriptionIdGenerator:
    """Thread-safe monotonic id generator."""

    def __init__(self, start: int = 0):
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            return base62(next(self._counter))


_generator = ClientSubscriptionIdGenerator()


def next_client_subscription_id() -> str:
    return _generator.next_id()


def set_id_generator(generator: ClientSubscriptionIdGenerator) -> ClientSubscriptionIdGenerator:
    """Replace the process-wide generator (for tests). Returns the previous one."""
    global _generator
    previous = _generator
    _generator = generator
    return previous
