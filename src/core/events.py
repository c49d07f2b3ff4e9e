# src/core/events.py - v1
"""Minimal observer list used for push notifications between components.

Each publisher owns its own ``Subscribers`` instance; there is no global bus.
A failing callback is logged and does not prevent the remaining callbacks
from running, nor does it propagate back into the publisher.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Unsubscribe = Callable[[], None]


class Subscribers(Generic[T]):
    """Ordered set of callbacks receiving one value per notification."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._callbacks: list[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> Unsubscribe:
        """Register ``callback`` and return a handle that removes it."""
        self._callbacks.append(callback)

        def _unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return _unsubscribe

    def emit(self, value: T) -> None:
        for callback in list(self._callbacks):
            try:
                callback(value)
            except Exception:
                logger.exception("Subscriber of %s failed on %r", self._name, value)

    def __len__(self) -> int:
        return len(self._callbacks)
