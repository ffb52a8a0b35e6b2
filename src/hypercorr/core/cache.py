"""
Key-value caching layer backed by Redis.

Falls back to an in-process dict when Redis is unavailable (or disabled
with ``DISABLE_REDIS=1``), so the service still works without Docker /
Redis running.  Both backends expose the same three-method interface
(``get`` / ``set`` / ``delete``) so callers such as
:class:`~src.hypercorr.core.result_cache.ResultCache` can take either one,
or a fake, by injection.
"""

import logging
import threading
import time
from typing import Callable, Protocol

from src.hypercorr.core.config import load_settings

logger = logging.getLogger("cache")


class KeyValueStore(Protocol):
    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, data: bytes, ttl: int | None = None) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """Thread-safe in-memory store with optional per-key TTL (seconds)."""

    backend = "memory"

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._data: dict[str, tuple[bytes, float | None]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            data, expires = entry
            if expires is not None and self._clock() > expires:
                del self._data[key]
                return None
            return data

    def set(self, key: str, data: bytes, ttl: int | None = None) -> None:
        expires = self._clock() + ttl if ttl else None
        with self._lock:
            self._data[key] = (data, expires)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()


class RedisStore:
    """Thin wrapper over a ``redis.Redis`` client (bytes in, bytes out)."""

    backend = "redis"

    def __init__(self, client):
        self._client = client

    def get(self, key: str) -> bytes | None:
        result = self._client.get(key)
        if isinstance(result, bytes):
            return result
        return None

    def set(self, key: str, data: bytes, ttl: int | None = None) -> None:
        if ttl:
            self._client.setex(key, ttl, data)
        else:
            self._client.set(key, data)

    def delete(self, key: str) -> None:
        self._client.delete(key)

    def ping(self) -> bool:
        return bool(self._client.ping())


# ---------------------------------------------------------------------------
# Process-wide default store
# ---------------------------------------------------------------------------

_store: KeyValueStore | None = None
_store_lock = threading.Lock()


def _connect_redis(url: str) -> RedisStore | None:
    try:
        import redis

        client = redis.from_url(url, decode_responses=False)
        client.ping()
        logger.info("Connected to Redis at %s", url)
        return RedisStore(client)
    except Exception as exc:
        logger.warning("Redis unavailable (%s) — using in-memory cache", exc)
        return None


def get_store() -> KeyValueStore:
    """Return the process-wide store, connecting to Redis on first use."""
    global _store
    with _store_lock:
        if _store is None:
            settings = load_settings()
            redis_store = None
            if not settings.disable_redis:
                redis_store = _connect_redis(settings.redis_url)
            _store = redis_store if redis_store is not None else MemoryStore()
        return _store


def set_store(store: KeyValueStore | None) -> None:
    """Replace the process-wide store (``None`` forces a reconnect)."""
    global _store
    with _store_lock:
        _store = store
