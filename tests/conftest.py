# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Shared test fixtures and configuration."""

import json
from pathlib import Path

import pytest

from foliocache.cache.content import ContentCache
from foliocache.cache.memory import MemoryStore
from foliocache.cache.policy import CachePolicy

BLOG_POSTS = [
    {"id": "p1", "title": "x"},
    {"id": "p2", "title": "y"},
]
HERO = {"title": "Hello", "subtitle": "Portfolio"}


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore(max_size=128)


@pytest.fixture
def policy() -> CachePolicy:
    return CachePolicy()


@pytest.fixture
def content_cache(memory_store: MemoryStore, policy: CachePolicy) -> ContentCache:
    return ContentCache(store=memory_store, policy=policy)


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    data = tmp_path / "data"
    data.mkdir()
    (data / "blog.json").write_text(json.dumps(BLOG_POSTS), encoding="utf-8")
    (data / "hero.json").write_text(json.dumps(HERO), encoding="utf-8")
    return data


class CountingLoader:
    """Loader double that records how often it was called."""

    def __init__(self, value: object = None, error: Exception | None = None) -> None:
        self.value = value
        self.error = error
        self.calls = 0

    async def __call__(self) -> object:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.value


@pytest.fixture
def make_loader() -> type[CountingLoader]:
    return CountingLoader
