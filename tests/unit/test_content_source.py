# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the JSON file content source."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from foliocache.cache.content import ContentCache
from foliocache.cache.policy import ContentType
from foliocache.content.source import JsonFileContentSource
from foliocache.core.exceptions import ContentNotFoundError


@pytest.fixture
def source(content_dir: Path) -> JsonFileContentSource:
    return JsonFileContentSource(content_dir)


class TestJsonFileContentSource:
    def test_available_types(self, source: JsonFileContentSource) -> None:
        assert source.available_types() == [ContentType.HERO, ContentType.BLOG]

    async def test_read(self, source: JsonFileContentSource) -> None:
        posts = await source.read(ContentType.BLOG)
        assert [p["id"] for p in posts] == ["p1", "p2"]

    async def test_read_missing(self, source: JsonFileContentSource) -> None:
        with pytest.raises(ContentNotFoundError, match="sns"):
            await source.read(ContentType.SNS)

    async def test_read_item(self, source: JsonFileContentSource) -> None:
        assert await source.read_item("blog", "p2") == {"id": "p2", "title": "y"}

    async def test_read_item_from_items_object(
        self, source: JsonFileContentSource, content_dir: Path
    ) -> None:
        document = {"items": [{"id": 7, "name": "portfolio"}]}
        (content_dir / "projects.json").write_text(json.dumps(document), encoding="utf-8")
        assert await source.read_item("projects", "7") == {"id": 7, "name": "portfolio"}

    async def test_read_item_missing(self, source: JsonFileContentSource) -> None:
        with pytest.raises(ContentNotFoundError, match="p9"):
            await source.read_item("blog", "p9")

    async def test_write_replaces_document(
        self, source: JsonFileContentSource, content_dir: Path
    ) -> None:
        await source.write(ContentType.SNS, [{"id": "s1", "text": "hi"}])

        assert json.loads((content_dir / "sns.json").read_text(encoding="utf-8")) == [
            {"id": "s1", "text": "hi"}
        ]
        assert not (content_dir / "sns.json.tmp").exists()

    async def test_write_creates_directory(self, tmp_path: Path) -> None:
        source = JsonFileContentSource(tmp_path / "fresh")
        await source.write("hero", {"title": "Hi"})
        assert await source.read("hero") == {"title": "Hi"}

    async def test_loader_feeds_the_cache(
        self, source: JsonFileContentSource, content_cache: ContentCache
    ) -> None:
        value = await content_cache.get_or_load("hero", None, source.loader("hero"))
        assert value == {"title": "Hello", "subtitle": "Portfolio"}

        item = await content_cache.get_or_load("blog", "p1", source.item_loader("blog", "p1"))
        assert item == {"id": "p1", "title": "x"}
