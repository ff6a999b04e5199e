# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""JSON file content source.

Each content type lives in ``<content_dir>/<type>.json``.  A collection is
either a JSON list of items or an object with an ``items`` list; items are
addressed by their ``id`` field.  This is the source of truth the content
cache sits in front of; it is deliberately simple and knows nothing about
caching.
"""

from __future__ import annotations

import json
import logging
from functools import partial
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

from foliocache.cache.content import Loader
from foliocache.cache.policy import ContentType
from foliocache.core.exceptions import ContentNotFoundError

logger = logging.getLogger("foliocache.content.source")


class JsonFileContentSource:
    """Reads and writes content documents stored as JSON files."""

    def __init__(self, base_dir: Path) -> None:
        self._base_dir = Path(base_dir)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def path_for(self, content_type: ContentType | str) -> Path:
        return self._base_dir / f"{content_type}.json"

    def available_types(self) -> list[ContentType]:
        """Content types that currently have a document on disk."""
        return [ct for ct in ContentType if self.path_for(ct).is_file()]

    async def read(self, content_type: ContentType | str) -> Any:
        path = self.path_for(content_type)
        try:
            async with aiofiles.open(path, encoding="utf-8") as fh:
                raw = await fh.read()
        except FileNotFoundError as exc:
            raise ContentNotFoundError(f"No content stored for {content_type}") from exc
        return json.loads(raw)

    async def read_item(self, content_type: ContentType | str, item_id: str) -> Any:
        document = await self.read(content_type)
        items = document.get("items") if isinstance(document, dict) else document
        if isinstance(items, list):
            for item in items:
                if isinstance(item, dict) and str(item.get("id")) == item_id:
                    return item
        raise ContentNotFoundError(f"No {content_type} item with id {item_id!r}")

    async def write(self, content_type: ContentType | str, document: Any) -> None:
        """Replace the document for *content_type*.

        Written to a temporary file first and renamed into place so readers
        never see a half-written file.
        """
        path = self.path_for(content_type)
        tmp_path = path.with_suffix(".json.tmp")
        await aiofiles.os.makedirs(self._base_dir, exist_ok=True)
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as fh:
            await fh.write(json.dumps(document, ensure_ascii=False, indent=2))
        await aiofiles.os.replace(tmp_path, path)
        logger.info("Stored %s content (%s)", content_type, path.name)

    def loader(self, content_type: ContentType | str) -> Loader:
        """Zero-argument loader for the whole collection of *content_type*."""
        return partial(self.read, content_type)

    def item_loader(self, content_type: ContentType | str, item_id: str) -> Loader:
        return partial(self.read_item, content_type, item_id)
