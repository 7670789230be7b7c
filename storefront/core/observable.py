"""
Observable state holders.

Base class for in-memory state objects (catalog view, cart) that let
callers subscribe to change notifications instead of reloading state.
"""

from __future__ import annotations

import logging
from typing import Callable, List


logger = logging.getLogger(__name__)

Listener = Callable[[object], None]


class Observable:
    """
    Minimal subscribe/notify mixin.

    Listeners receive the observable instance itself. A listener raising
    is logged and does not stop the remaining listeners.
    """

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a change listener.

        Returns:
            Function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception(f"Listener {listener!r} failed")
