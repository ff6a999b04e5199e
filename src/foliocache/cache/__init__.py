# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Content caching and invalidation layer."""

from foliocache.cache.base import BackendAvailability, KeyValueStore, NullStore
from foliocache.cache.content import (
    CacheEntry,
    CacheStats,
    ContentCache,
    WarmReport,
    create_content_cache,
    create_store_from_settings,
)
from foliocache.cache.invalidation import InvalidationHook, InvalidationOutcome
from foliocache.cache.memory import MemoryStore
from foliocache.cache.policy import CachePolicy, ContentType, TTLClass

__all__ = [
    "BackendAvailability",
    "CacheEntry",
    "CachePolicy",
    "CacheStats",
    "ContentCache",
    "ContentType",
    "InvalidationHook",
    "InvalidationOutcome",
    "KeyValueStore",
    "MemoryStore",
    "NullStore",
    "TTLClass",
    "WarmReport",
    "create_content_cache",
    "create_store_from_settings",
]
