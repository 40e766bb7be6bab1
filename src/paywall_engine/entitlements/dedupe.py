"""Process-local cache of processed webhook event ids."""

import threading
import time
from collections import OrderedDict
from typing import Callable


class ProcessedEventCache:
    """
    Bounded, time-windowed set of event ids.

    - Entries expire ``ttl`` seconds after they were recorded.
    - When ``max_size`` is reached the oldest entry is evicted.
    """

    def __init__(
        self,
        ttl: float = 86400,
        max_size: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self.max_size = max_size
        self._clock = clock
        self._lock = threading.Lock()
        self._seen: "OrderedDict[str, float]" = OrderedDict()

    def _purge(self, now: float) -> None:
        while self._seen:
            key, recorded_at = next(iter(self._seen.items()))
            if now - recorded_at < self.ttl:
                break
            del self._seen[key]

    def seen(self, event_id: str) -> bool:
        if not event_id:
            return False
        with self._lock:
            self._purge(self._clock())
            return event_id in self._seen

    def add(self, event_id: str) -> None:
        if not event_id:
            return
        with self._lock:
            now = self._clock()
            self._purge(now)
            self._seen.pop(event_id, None)
            self._seen[event_id] = now
            while len(self._seen) > self.max_size:
                self._seen.popitem(last=False)

    def __len__(self) -> int:
        with self._lock:
            self._purge(self._clock())
            return len(self._seen)
