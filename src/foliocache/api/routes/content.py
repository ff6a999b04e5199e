# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Public content reads and admin content writes.

Reads go through the content cache.  Writes go to the content source first;
the cache is invalidated afterwards by the route's invalidation hook, only
when the write succeeded.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel

from foliocache.api.deps import get_content_cache, get_content_source
from foliocache.api.invalidation import InvalidatingRoute, invalidates
from foliocache.cache.content import ContentCache
from foliocache.cache.policy import ContentType
from foliocache.content.source import JsonFileContentSource
from foliocache.core.exceptions import ContentNotFoundError

router = APIRouter(route_class=InvalidatingRoute)

PUBLISHED_TYPES = (ContentType.BLOG, ContentType.SNS, ContentType.HERO)


class ContentWriteResponse(BaseModel):
    ok: bool
    message: str
    content_types: list[str] = []


class PublishRequest(BaseModel):
    blog: list[dict[str, Any]] | None = None
    sns: list[dict[str, Any]] | None = None
    hero: dict[str, Any] | None = None


@router.get("/content/{content_type}")
async def read_collection(
    content_type: ContentType,
    cache: ContentCache = Depends(get_content_cache),
    source: JsonFileContentSource = Depends(get_content_source),
) -> Any:
    try:
        return await cache.get_or_load(content_type, None, source.loader(content_type))
    except ContentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("/content/{content_type}/{item_id}")
async def read_item(
    content_type: ContentType,
    item_id: str,
    cache: ContentCache = Depends(get_content_cache),
    source: JsonFileContentSource = Depends(get_content_source),
) -> Any:
    try:
        return await cache.get_or_load(
            content_type, item_id, source.item_loader(content_type, item_id)
        )
    except ContentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.put("/admin/content/{content_type}", response_model=ContentWriteResponse)
@invalidates(path_param="content_type")
async def replace_collection(
    content_type: ContentType,
    document: Any = Body(...),
    cache: ContentCache = Depends(get_content_cache),
    source: JsonFileContentSource = Depends(get_content_source),
) -> ContentWriteResponse:
    """Replace a whole content document."""
    if not isinstance(document, (list, dict)):
        raise HTTPException(status_code=400, detail="Content must be a JSON object or array")
    await source.write(content_type, document)
    cache.register_loader(content_type, source.loader(content_type))
    return ContentWriteResponse(
        ok=True, message=f"{content_type} content saved", content_types=[content_type.value]
    )


@router.post("/admin/content/publish", response_model=ContentWriteResponse)
@invalidates(*PUBLISHED_TYPES)
async def publish(
    payload: PublishRequest,
    cache: ContentCache = Depends(get_content_cache),
    source: JsonFileContentSource = Depends(get_content_source),
) -> ContentWriteResponse:
    """Write blog, SNS and hero content in one go."""
    documents = {
        ContentType.BLOG: payload.blog,
        ContentType.SNS: payload.sns,
        ContentType.HERO: payload.hero,
    }
    written = []
    for content_type, document in documents.items():
        if document is not None:
            await source.write(content_type, document)
            cache.register_loader(content_type, source.loader(content_type))
            written.append(content_type.value)
    if not written:
        return ContentWriteResponse(ok=False, message="Nothing to publish")
    return ContentWriteResponse(
        ok=True, message=f"Published {', '.join(written)}", content_types=written
    )
