"""Redis-backed response cache, shared between workers."""

import json
from typing import Any

import redis
import structlog

from bookstore.cache.port import ResponseCache

logger = structlog.get_logger(__name__)


class RedisResponseCache(ResponseCache):
    def __init__(self, client: redis.Redis) -> None:
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisResponseCache":
        return cls(redis.Redis.from_url(url, decode_responses=True, socket_timeout=2))

    def get(self, key: str) -> Any | None:
        raw = self.client.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("cache_entry_corrupt", key=key)
            self.client.delete(key)
            return None

    def set(self, key: str, value: Any, ttl: int) -> None:
        self.client.set(key, json.dumps(value, default=str), ex=ttl)

    def delete_prefix(self, prefix: str) -> int:
        keys = list(self.client.scan_iter(match=f"{prefix}*"))
        if not keys:
            return 0
        return self.client.delete(*keys)
