"""
Custom exceptions for the livegraph client.
"""

from __future__ import annotations

from typing import Any, Optional


class LivegraphError(Exception):
    """Base exception for all livegraph errors."""
    pass


class InvariantViolation(LivegraphError):
    """
    Raised when a programming contract is broken.

    Malformed update configs, several root fragments, a missing edge field or
    a disposable attached twice all end up here. These are never retried.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigError(LivegraphError):
    """Raised when a configuration file is invalid."""
    pass


class TransportError(LivegraphError):
    """Raised by a transport when the server reports a subscription error."""

    def __init__(self, message: str, errors: Optional[list[Any]] = None):
        self.errors = errors or []
        super().__init__(message)


def invariant(condition: Any, message: str, *args: Any) -> None:
    """
    Raise InvariantViolation with a %-formatted message unless condition holds.

    Usage:
        invariant(fragment is not None, "%s: expected a fragment", name)
    """
    if not condition:
        raise InvariantViolation(message % args if args else message)
