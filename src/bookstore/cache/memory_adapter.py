"""In-process response cache for development, tests and single-worker deployments."""

import threading
import time
from typing import Any

from bookstore.cache.port import ResponseCache


class InMemoryResponseCache(ResponseCache):
    def __init__(self, clock=time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()
        self.fail_next_invalidation = False

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: int) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + ttl, value)

    def delete_prefix(self, prefix: str) -> int:
        if self.fail_next_invalidation:
            self.fail_next_invalidation = False
            raise ConnectionError("cache unavailable")

        with self._lock:
            doomed = [key for key in self._entries if key.startswith(prefix)]
            for key in doomed:
                del self._entries[key]
        return len(doomed)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)
