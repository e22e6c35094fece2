"""Response cache factory and invalidation.

Provides get_cache() / set_cache() to swap implementations:
- InMemoryResponseCache for development and testing
- RedisResponseCache when CACHE_BACKEND=redis
"""

import structlog

from bookstore.cache.memory_adapter import InMemoryResponseCache
from bookstore.cache.port import ResponseCache
from bookstore.config import get_settings

logger = structlog.get_logger(__name__)

CACHE_PREFIX = "__cache__"

_current_cache: ResponseCache | None = None


def _build_cache() -> ResponseCache:
    settings = get_settings()
    if settings.cache_backend == "redis":
        from bookstore.cache.redis_adapter import RedisResponseCache

        return RedisResponseCache.from_url(settings.redis_url)
    return InMemoryResponseCache()


def get_cache() -> ResponseCache:
    """Return the current response cache. Defaults to the configured backend."""
    global _current_cache
    if _current_cache is None:
        _current_cache = _build_cache()
    return _current_cache


def set_cache(cache: ResponseCache) -> None:
    """Override the active response cache (useful for tests)."""
    global _current_cache
    _current_cache = cache


def reset_cache() -> None:
    """Reset to default cache."""
    global _current_cache
    _current_cache = None


def cache_key(path: str) -> str:
    return f"{CACHE_PREFIX}{path}"


def invalidate_responses(reason: str) -> bool:
    """Drop every cached response after a write that changes stock or orders.

    A failure is logged and reported through the return value, never raised:
    the write it follows has already committed.
    """
    try:
        removed = get_cache().delete_prefix(CACHE_PREFIX)
    except Exception:
        logger.exception("cache_invalidation_failed", reason=reason)
        return False

    logger.info("cache_invalidated", reason=reason, removed=removed)
    return True
