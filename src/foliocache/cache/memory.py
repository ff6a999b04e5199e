# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""In-memory LRU key-value store with TTL expiry.

Requires no external services.  Suitable for development, single-process
deployments and tests.  Pattern deletion uses the same glob syntax as Redis
(``*``, ``?``, ``[...]``).
"""

from __future__ import annotations

import math
import time
from collections import OrderedDict
from fnmatch import fnmatchcase

from foliocache.cache.base import BackendAvailability, KeyValueStore

# Default maximum number of entries before eviction kicks in.
_DEFAULT_MAX_SIZE = 4096


class _Entry:
    """A stored value with an optional expiry timestamp."""

    __slots__ = ("expires_at", "value")

    def __init__(self, value: str, expires_at: float | None) -> None:
        self.value = value
        self.expires_at = expires_at

    def is_expired(self) -> bool:
        return self.expires_at is not None and time.monotonic() > self.expires_at


class MemoryStore(KeyValueStore):
    """In-memory LRU store with TTL support.

    The store starts out connected.  :meth:`close` drops all entries and
    marks it unavailable until :meth:`connect` is called again, which makes
    it convenient for exercising pass-through behaviour.

    Args:
        max_size: Maximum number of entries.  When exceeded the least
            recently used entry is evicted.
    """

    def __init__(self, max_size: int = _DEFAULT_MAX_SIZE) -> None:
        self._store: OrderedDict[str, _Entry] = OrderedDict()
        self._max_size = max_size
        self._connected = True

    @property
    def availability(self) -> BackendAvailability:
        if self._connected:
            return BackendAvailability.CONNECTED
        return BackendAvailability.UNAVAILABLE

    async def connect(self) -> bool:
        self._connected = True
        return True

    # ------------------------------------------------------------------
    # KeyValueStore interface
    # ------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        if not self._connected:
            return None
        entry = self._live(key)
        if entry is None:
            return None
        # Move to end (most recently used)
        self._store.move_to_end(key)
        return entry.value

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        if not self._connected:
            return False
        expires_at = (time.monotonic() + ttl) if ttl is not None else None
        if key in self._store:
            self._store.move_to_end(key)
        self._store[key] = _Entry(value=value, expires_at=expires_at)
        while len(self._store) > self._max_size:
            self._store.popitem(last=False)
        return True

    async def delete(self, key: str) -> bool:
        if not self._connected:
            return False
        self._store.pop(key, None)
        return True

    async def delete_pattern(self, pattern: str) -> bool:
        if not self._connected:
            return False
        for key in [k for k in self._store if fnmatchcase(k, pattern)]:
            del self._store[key]
        return True

    async def exists(self, key: str) -> bool:
        if not self._connected:
            return False
        return self._live(key) is not None

    async def expire(self, key: str, ttl: int) -> bool:
        if not self._connected:
            return False
        entry = self._live(key)
        if entry is None:
            return False
        entry.expires_at = time.monotonic() + ttl
        return True

    async def ttl(self, key: str) -> int | None:
        if not self._connected:
            return None
        entry = self._live(key)
        if entry is None or entry.expires_at is None:
            return None
        return max(0, math.ceil(entry.expires_at - time.monotonic()))

    async def increment(self, key: str) -> int:
        if not self._connected:
            return 0
        entry = self._live(key)
        try:
            current = int(entry.value) if entry is not None else 0
        except ValueError:
            # same outcome as a Redis INCR on a non-integer value
            return 0
        expires_at = entry.expires_at if entry is not None else None
        self._store[key] = _Entry(value=str(current + 1), expires_at=expires_at)
        self._store.move_to_end(key)
        return current + 1

    async def flush(self) -> bool:
        if not self._connected:
            return False
        self._store.clear()
        return True

    async def close(self) -> None:
        self._store.clear()
        self._connected = False

    def keys(self) -> list[str]:
        """Return live keys, oldest first."""
        self._prune_expired()
        return list(self._store)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _live(self, key: str) -> _Entry | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.is_expired():
            del self._store[key]
            return None
        return entry

    def _prune_expired(self) -> None:
        """Remove all expired entries."""
        expired_keys = [k for k, v in self._store.items() if v.is_expired()]
        for k in expired_keys:
            del self._store[k]
