from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Callable, Optional


def normalize_url(url: str) -> str:
    return url.strip()


class SummaryCache:
    """In-memory URL -> summary store whose entries expire `ttl_seconds` after insertion.

    Expiry is passive: an expired entry is dropped the next time it is read.
    `max_entries` (0 = unbounded) evicts expired entries first, then the oldest.
    """

    def __init__(
        self,
        ttl_seconds: float = 60 * 60,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        # key -> (expires_at, summary); insertion order doubles as age order.
        self._entries: OrderedDict[str, tuple[float, str]] = OrderedDict()

    def get(self, url: str) -> Optional[str]:
        key = normalize_url(url)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, summary = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return summary

    def set(self, url: str, summary: str) -> None:
        key = normalize_url(url)
        with self._lock:
            now = self._clock()
            self._entries.pop(key, None)
            if self.max_entries and len(self._entries) >= self.max_entries:
                self._purge_expired(now)
                while len(self._entries) >= self.max_entries:
                    self._entries.popitem(last=False)
            self._entries[key] = (now + self.ttl_seconds, summary)

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired(self._clock())
            return len(self._entries)

    def _purge_expired(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for k in expired:
            del self._entries[k]
