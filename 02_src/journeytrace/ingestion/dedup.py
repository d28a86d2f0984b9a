"""Server-side suppression of redelivered queue items."""

import time
from collections import OrderedDict
from typing import Callable


class DeliveryDeduplicator:
    """
    Remembers (session_id, item id) pairs for a bounded time window.

    Entries expire after `window_seconds`; when more than `max_entries`
    are held, the least recently marked ones are evicted first.
    """

    def __init__(
        self,
        window_seconds: float = 600.0,
        max_entries: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ):
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._window = window_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._seen: OrderedDict[tuple[str, str], float] = OrderedDict()

    def __len__(self) -> int:
        return len(self._seen)

    def _expire(self, now: float) -> None:
        while self._seen:
            key, marked_at = next(iter(self._seen.items()))
            if now - marked_at < self._window:
                break
            self._seen.popitem(last=False)

    def seen(self, session_id: str, delivery_id: str | None) -> bool:
        """True if this item was already materialized inside the window."""
        if delivery_id is None:
            return False
        self._expire(self._clock())
        return (session_id, delivery_id) in self._seen

    def mark(self, session_id: str, delivery_id: str | None) -> None:
        if delivery_id is None:
            return
        key = (session_id, delivery_id)
        self._seen[key] = self._clock()
        self._seen.move_to_end(key)
        while len(self._seen) > self._max_entries:
            self._seen.popitem(last=False)
