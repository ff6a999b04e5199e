# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Read-through content cache.

The :class:`ContentCache` is the primary public interface for the caching
layer.  It builds keys from the :class:`~foliocache.cache.policy.CachePolicy`,
serialises values into :class:`CacheEntry` envelopes, tracks hit/miss
statistics, and degrades to a pass-through when the store is unavailable.

Writes never go through the cache: callers mutate the source of truth and
then invalidate (cache-aside).
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError

from foliocache.cache.base import BackendAvailability, KeyValueStore, NullStore
from foliocache.cache.policy import CachePolicy, ContentType
from foliocache.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from foliocache.core.config import Settings

logger = logging.getLogger("foliocache.cache.content")

Loader = Callable[[], Awaitable[Any] | Any]


class CacheEntry(BaseModel):
    """One cached value together with the TTL it was written with."""

    key: str
    value: Any
    stored_at: datetime
    ttl_seconds: int


class CacheStats:
    """Simple hit/miss counter.

    Counters are per process; with several workers sharing one Redis each
    worker reports only its own traffic.
    """

    __slots__ = ("hits", "invalidations", "misses")

    def __init__(self) -> None:
        self.hits: int = 0
        self.misses: int = 0
        self.invalidations: int = 0

    @property
    def total(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        return self.hits / self.total if self.total else 0.0

    def reset(self) -> None:
        self.hits = 0
        self.misses = 0
        self.invalidations = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "total": self.total,
            "invalidations": self.invalidations,
            "hit_rate": round(self.hit_rate, 4),
        }


@dataclass
class WarmReport:
    """Outcome of :meth:`ContentCache.warm_cache`."""

    backend_availability: BackendAvailability
    warmed: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def proceeded(self) -> bool:
        """False only when there was nothing to load and nowhere to store it."""
        return (
            bool(self.warmed or self.failed)
            or self.backend_availability is BackendAvailability.CONNECTED
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "warmed": list(self.warmed),
            "failed": dict(self.failed),
            "backend_availability": self.backend_availability.value,
        }


class ContentCache:
    """Read-through cache in front of slow content loaders.

    Args:
        store: Key-value backend.  Defaults to a :class:`NullStore`, i.e.
            pure pass-through.
        policy: TTL and key policy.
        single_flight: Collapse concurrent misses for the same key into a
            single loader call.  Off by default; redundant loads are
            harmless because loaders are idempotent reads.
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        policy: CachePolicy | None = None,
        *,
        single_flight: bool = False,
    ) -> None:
        self._store = store or NullStore()
        self._policy = policy or CachePolicy()
        self._single_flight = single_flight
        self._stats = CacheStats()
        self._loaders: dict[str, Loader] = {}
        self._inflight: dict[str, asyncio.Task[Any]] = {}

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @property
    def policy(self) -> CachePolicy:
        return self._policy

    @property
    def availability(self) -> BackendAvailability:
        return self._store.availability

    @property
    def stats(self) -> CacheStats:
        return self._stats

    @property
    def loaders(self) -> dict[str, Loader]:
        return dict(self._loaders)

    def register_loader(self, content_type: ContentType | str, loader: Loader) -> None:
        """Register the whole-collection loader used by :meth:`warm_cache`."""
        self._loaders[str(content_type)] = loader

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_or_load(
        self,
        content_type: ContentType | str,
        identifier: str | None,
        loader: Loader,
    ) -> Any:
        """Return the cached value, or load, cache and return it.

        Loader exceptions propagate unchanged and nothing is cached.
        """
        key = self._policy.key_for(content_type, identifier)
        entry = await self._read(key)
        if entry is not None:
            self._stats.hits += 1
            logger.debug("Cache HIT %s", key)
            return entry.value

        self._stats.misses += 1
        logger.debug("Cache MISS %s", key)

        if not self._single_flight:
            return await self._load_and_store(content_type, key, loader)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load_and_store(content_type, key, loader))
            self._inflight[key] = task
            task.add_done_callback(lambda _t, k=key: self._inflight.pop(k, None))
        return await asyncio.shield(task)

    async def peek(
        self, content_type: ContentType | str, identifier: str | None = None
    ) -> CacheEntry | None:
        """Return the stored entry without touching the statistics."""
        return await self._read(self._policy.key_for(content_type, identifier))

    async def _read(self, key: str) -> CacheEntry | None:
        raw = await self._store.get(key)
        if raw is None:
            return None
        try:
            return CacheEntry.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding undecodable cache entry %s", key)
            await self._store.delete(key)
            return None

    async def _load_and_store(
        self, content_type: ContentType | str, key: str, loader: Loader
    ) -> Any:
        value = loader()
        if inspect.isawaitable(value):
            value = await value
        await self._write(content_type, key, value)
        return value

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def set(
        self, content_type: ContentType | str, identifier: str | None, value: Any
    ) -> bool:
        """Overwrite an entry explicitly.  Returns ``False`` if not cached."""
        key = self._policy.key_for(content_type, identifier)
        return await self._write(content_type, key, value)

    async def _write(self, content_type: ContentType | str, key: str, value: Any) -> bool:
        ttl = self._policy.ttl_for(content_type)
        entry = CacheEntry(key=key, value=value, stored_at=datetime.now(UTC), ttl_seconds=ttl)
        try:
            payload = entry.model_dump_json()
        except PydanticSerializationError as exc:
            logger.warning("Value for %s is not JSON serialisable, not cached: %s", key, exc)
            return False
        return await self._store.set(key, payload, ttl=ttl)

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------

    async def invalidate(
        self, content_type: ContentType | str, identifier: str | None = None
    ) -> bool:
        """Drop one entry, or the whole-collection entry when *identifier* is omitted.

        Returns whether the delete reached the backend.  Never raises.
        """
        key = self._policy.key_for(content_type, identifier)
        return self._record_invalidation(key, await self._store.delete(key))

    async def invalidate_pattern(self, pattern: str) -> bool:
        """Drop every key matching a glob pattern, e.g. ``"blog:*"``."""
        return self._record_invalidation(pattern, await self._store.delete_pattern(pattern))

    async def invalidate_content_type(self, content_type: ContentType | str) -> bool:
        """Drop the whole namespace of a content type plus its route-level keys."""
        patterns = [
            self._policy.pattern_for(content_type),
            *self._policy.route_patterns_for(content_type),
        ]
        results = [await self.invalidate_pattern(p) for p in patterns]
        return all(results)

    async def invalidate_all(self) -> bool:
        names = dict.fromkeys([ct.value for ct in self._policy.content_types] + list(self._loaders))
        results = [await self.invalidate_content_type(name) for name in names]
        logger.info("Invalidated all content types (%d)", len(results))
        return all(results)

    def _record_invalidation(self, target: str, effective: bool) -> bool:
        if effective:
            self._stats.invalidations += 1
            logger.debug("Invalidated %s", target)
        elif self._store.available:
            logger.warning("Cache invalidation failed for %s", target)
        else:
            logger.debug("Skipped invalidation of %s: backend %s", target, self.availability)
        return effective

    # ------------------------------------------------------------------
    # Warming and statistics
    # ------------------------------------------------------------------

    async def warm_cache(self) -> WarmReport:
        """Load every registered collection into the cache.

        A failing loader is logged and skipped; the others still run.
        """
        report = WarmReport(backend_availability=self.availability)
        for name, loader in self._loaders.items():
            try:
                await self.get_or_load(name, None, loader)
            except Exception as exc:
                logger.warning("Failed to warm %s: %s", name, exc)
                report.failed[name] = str(exc)
            else:
                report.warmed.append(name)
        logger.info(
            "Cache warm finished: %d warmed, %d failed", len(report.warmed), len(report.failed)
        )
        return report

    def get_stats(self) -> dict[str, object]:
        return self._stats.to_dict()

    def reset_stats(self) -> None:
        self._stats.reset()

    async def close(self) -> None:
        """Release resources held by the backend."""
        await self._store.close()


def create_store_from_settings(settings: Settings) -> KeyValueStore:
    """Instantiate the key-value store named by ``settings.cache_backend``."""
    backend = settings.cache_backend.strip().lower()
    if backend == "redis":
        from foliocache.cache.redis import RedisStore

        return RedisStore.from_settings(settings)
    if backend == "memory":
        from foliocache.cache.memory import MemoryStore

        return MemoryStore()
    if backend == "none":
        return NullStore()
    raise ConfigurationError(
        f"Unknown cache backend {settings.cache_backend!r}; expected redis, memory or none"
    )


def create_content_cache(
    settings: Settings, store: KeyValueStore | None = None
) -> ContentCache:
    """Build a :class:`ContentCache` from application settings."""
    return ContentCache(
        store=store or create_store_from_settings(settings),
        policy=CachePolicy.from_settings(settings),
        single_flight=settings.single_flight,
    )
