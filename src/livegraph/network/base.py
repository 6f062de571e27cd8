"""
Transport interfaces.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol

if TYPE_CHECKING:
    from .request import SubscriptionRequest


class Disposable(Protocol):
    """Handle whose `dispose()` releases a resource. Must be idempotent."""

    def dispose(self) -> None:
        ...


@dataclass
class CallbackDisposable:
    """Disposable wrapping a plain callable."""
    callback: Callable[[], None]

    def dispose(self) -> None:
        self.callback()


@dataclass
class SubscriptionCallbacks:
    """
    Callback surface for subscription events.

    Used both for user callbacks (all optional) and for the observer surface
    handed to transports.
    """
    on_next: Optional[Callable[[Any], None]] = None
    on_error: Optional[Callable[[Any], None]] = None
    on_completed: Optional[Callable[[], None]] = None


class NetworkLayer(Protocol):
    """Transport able to send subscriptions."""

    def send_subscription(self, request: SubscriptionRequest) -> Disposable:
        """Start the subscription and return a disposable that stops it."""
        ...
