# src/myday/core/events.py

"""
Synchronous change publication.

Stores call publish() after a mutation has committed. Listeners run in
subscription order before publish() returns, so readers observe derived state
(counts, badge) consistent with the mutation they just made.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class ChangeNotifier:
    def __init__(self, name: str) -> None:
        self._name = name
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def publish(self) -> None:
        # A failing listener must not undo or block the committed mutation.
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("%s change listener failed: %r", self._name, listener)
