"""Response cache port.

Cached values are JSON-compatible response bodies keyed by request path.
Adapters may lose entries at any time; callers treat a miss as "recompute".
"""

from abc import ABC, abstractmethod
from typing import Any


class ResponseCache(ABC):
    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the cached value, or None on a miss or expiry."""
        ...

    @abstractmethod
    def set(self, key: str, value: Any, ttl: int) -> None:
        """Store ``value`` for ``ttl`` seconds."""
        ...

    @abstractmethod
    def delete_prefix(self, prefix: str) -> int:
        """Drop every key starting with ``prefix``. Returns how many were removed."""
        ...
