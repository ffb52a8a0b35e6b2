"""
Single-slot cache for the last computed correlation result.

The slot lives in a :class:`~src.hypercorr.core.cache.KeyValueStore` under
a fixed key (``hyperCorrCache_v1`` by default) and holds JSON of the form::

    {"timestamp": 1735689600000,
     "data": {"matrix": {...}, "sortedAssets": [...]}}

Freshness is judged from the stored ``timestamp`` against an injected
clock: an entry is fresh while ``0 <= now - timestamp < ttl_ms``, so an entry
exactly seven days old is already stale and a future timestamp is rejected.
Anything stale or structurally invalid is deleted on read and reported as a
miss; it is never repaired.  A store that fails on read is also a miss.
"""

import json
import logging
import math
import time
from typing import Callable

from pydantic import ValidationError

from src.hypercorr.core.cache import KeyValueStore, get_store
from src.hypercorr.core.config import DEFAULT_CACHE_KEY, DEFAULT_CACHE_TTL_MS
from src.hypercorr.core.models import CacheEntry

logger = logging.getLogger("result_cache")


def _now_ms() -> int:
    return int(time.time() * 1000)


class ResultCache:
    def __init__(
        self,
        store: KeyValueStore | None = None,
        key: str = DEFAULT_CACHE_KEY,
        ttl_ms: int = DEFAULT_CACHE_TTL_MS,
        clock: Callable[[], int] = _now_ms,
    ):
        self._store = store
        self.key = key
        self.ttl_ms = ttl_ms
        self._clock = clock

    @property
    def store(self) -> KeyValueStore:
        # Resolved lazily so constructing a cache never touches Redis
        if self._store is None:
            self._store = get_store()
        return self._store

    def now_ms(self) -> int:
        return self._clock()

    def is_fresh(self, entry: CacheEntry) -> bool:
        # A timestamp ahead of the clock is not trusted
        age = self._clock() - entry.timestamp
        return 0 <= age < self.ttl_ms

    def _discard(self) -> None:
        try:
            self.store.delete(self.key)
        except Exception as exc:
            logger.warning("Could not delete cache slot %s: %s", self.key, exc)

    def get(self) -> CacheEntry | None:
        """Return the cached entry, or ``None`` if absent, stale or corrupt.

        A store that cannot be read is reported as a miss.
        """
        try:
            raw = self.store.get(self.key)
        except Exception as exc:
            logger.warning("Cache slot %s unreadable from store: %s", self.key, exc)
            return None
        if raw is None:
            return None

        try:
            entry = CacheEntry.from_payload(json.loads(raw))
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as exc:
            logger.warning("Discarding unreadable cache slot %s: %s", self.key, exc)
            self._discard()
            return None

        if not self.is_fresh(entry):
            logger.info(
                "Discarding stale cache slot %s (age %.1fh)",
                self.key,
                (self._clock() - entry.timestamp) / 3_600_000,
            )
            self._discard()
            return None

        return entry

    def put(self, entry: CacheEntry) -> None:
        """Overwrite the slot with *entry*."""
        data = json.dumps(entry.to_payload(), allow_nan=False).encode()
        # Store-side TTL is only a backstop; get() applies the exact window
        ttl_seconds = max(1, math.ceil(self.ttl_ms / 1000))
        self.store.set(self.key, data, ttl_seconds)
        logger.debug(
            "Cached %d assets under %s", len(entry.rankedAssets), self.key
        )

    def clear(self) -> None:
        self.store.delete(self.key)
