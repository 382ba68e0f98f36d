from __future__ import annotations

import threading
import time
from collections import deque
from typing import Callable


class SlidingWindowRateLimiter:
    """Allow at most `max_requests` hits per `window_seconds` per client key."""

    def __init__(
        self,
        max_requests: int = 50,
        window_seconds: float = 15 * 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._hits: dict[str, deque[float]] = {}

    @property
    def enabled(self) -> bool:
        return self.max_requests > 0

    def hit(self, key: str) -> bool:
        """Record a request for `key`; return False if it exceeds the window cap."""
        if not self.enabled:
            return True
        with self._lock:
            now = self._clock()
            cutoff = now - self.window_seconds
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if len(hits) >= self.max_requests:
                return False
            hits.append(now)
            self._prune(cutoff)
            return True

    def remaining(self, key: str) -> int:
        with self._lock:
            cutoff = self._clock() - self.window_seconds
            hits = self._hits.get(key, ())
            return max(0, self.max_requests - sum(1 for t in hits if t > cutoff))

    def _prune(self, cutoff: float) -> None:
        # Drop idle clients so the table does not grow with every address ever seen.
        idle = [k for k, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for k in idle:
            del self._hits[k]
