# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from foliocache import __version__
from foliocache.api.deps import get_content_cache
from foliocache.cache.content import ContentCache

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str


class ReadyResponse(BaseModel):
    status: str
    cache: str


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="ok", service="foliocache", version=__version__)


@router.get("/ready", response_model=ReadyResponse)
async def ready(cache: ContentCache = Depends(get_content_cache)) -> ReadyResponse:
    # Content is served with or without the cache backend, so the service
    # is ready either way; "degraded" flags pass-through mode.
    availability = cache.availability
    status = "ready" if cache.store.available else "degraded"
    return ReadyResponse(status=status, cache=availability.value)
