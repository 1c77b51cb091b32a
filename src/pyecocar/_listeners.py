"""Callback registry shared by the reconciler, the poller and the client."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class Listeners(Generic[T]):
    """Ordered list of callbacks; a failing callback is logged and skipped."""

    def __init__(self, label: str) -> None:
        self._label = label
        self._callbacks: list[Callable[[T], None]] = []

    def add(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register *callback*; returns an unsubscribe callable."""
        self._callbacks.append(callback)

        def _unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return _unsubscribe

    def notify(self, value: T) -> None:
        for callback in list(self._callbacks):
            try:
                callback(value)
            except Exception:
                _logger.warning("%s listener failed", self._label, exc_info=True)
