"""Shared pool of pending registry lookups."""

import threading
from collections.abc import Iterable

from .models import PendingLookup


class WorkQueue:
    """Lookups shared by the workers of one fetch run.

    Every access goes through a single lock. Operations never block and never
    await, so a worker cannot hold the lock across a network call. A worker
    that finds the queue empty is done.
    """

    def __init__(self, lookups: Iterable[PendingLookup] = ()):
        self._lock = threading.Lock()
        self._pending: list[PendingLookup] = list(lookups)

    def try_pop(self) -> PendingLookup | None:
        """Remove and return one lookup, or None when the queue is drained.

        Pop order is LIFO and carries no meaning for the output.
        """
        with self._lock:
            if not self._pending:
                return None
            return self._pending.pop()

    def is_empty(self) -> bool:
        with self._lock:
            return not self._pending

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)
