# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Cache management API endpoints.

During a backend outage the destructive operations below still answer with
success even though they were no-ops; ``GET /cache/stats`` reports
``backend_availability`` so operators can tell.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from foliocache.api.deps import get_content_cache
from foliocache.cache.content import ContentCache
from foliocache.cache.policy import ContentType
from foliocache.core.exceptions import UnknownContentTypeError

router = APIRouter()


class CacheStatsResponse(BaseModel):
    hits: int
    misses: int
    total: int
    invalidations: int
    hit_rate: float
    backend_availability: str
    policy: dict[str, dict[str, object]]


class CacheActionResponse(BaseModel):
    ok: bool
    message: str


class CacheWarmResponse(CacheActionResponse):
    warmed: list[str]
    failed: dict[str, str]
    backend_availability: str


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def cache_stats(cache: ContentCache = Depends(get_content_cache)) -> CacheStatsResponse:
    """Show cache hit/miss statistics and backend availability."""
    stats = cache.stats
    return CacheStatsResponse(
        hits=stats.hits,
        misses=stats.misses,
        total=stats.total,
        invalidations=stats.invalidations,
        hit_rate=round(stats.hit_rate, 4),
        backend_availability=cache.availability.value,
        policy=cache.policy.describe(),
    )


@router.post("/cache/invalidate/{content_type}", response_model=CacheActionResponse)
async def invalidate_content_type(
    content_type: str,
    cache: ContentCache = Depends(get_content_cache),
) -> CacheActionResponse:
    """Invalidate every cached entry of one content type."""
    try:
        member = ContentType.require(content_type)
    except UnknownContentTypeError as exc:
        valid = ", ".join(ct.value for ct in ContentType)
        raise HTTPException(
            status_code=400,
            detail=f"Invalid content type {exc.name!r}. Must be one of: {valid}",
        ) from exc

    await cache.invalidate_content_type(member)
    return CacheActionResponse(ok=True, message=f"Cache for '{member}' invalidated")


@router.post("/cache/invalidate-all", response_model=CacheActionResponse)
async def invalidate_all(cache: ContentCache = Depends(get_content_cache)) -> CacheActionResponse:
    """Invalidate every content type."""
    await cache.invalidate_all()
    return CacheActionResponse(ok=True, message="All caches invalidated")


@router.post("/cache/warm", response_model=CacheWarmResponse)
async def warm_cache(cache: ContentCache = Depends(get_content_cache)) -> CacheWarmResponse:
    """Pre-load every registered content collection."""
    report = await cache.warm_cache()
    if not report.proceeded:
        raise HTTPException(
            status_code=500,
            detail="Cache warming could not proceed: backend unavailable and no loaders registered",
        )
    if report.ok:
        message = f"Cache warmed ({len(report.warmed)} content types)"
    else:
        message = f"Cache partially warmed; failed: {', '.join(sorted(report.failed))}"
    return CacheWarmResponse(
        ok=report.ok,
        message=message,
        warmed=report.warmed,
        failed=report.failed,
        backend_availability=report.backend_availability.value,
    )


@router.post("/cache/reset-stats", response_model=CacheActionResponse)
async def reset_stats(cache: ContentCache = Depends(get_content_cache)) -> CacheActionResponse:
    """Zero the hit/miss counters."""
    cache.reset_stats()
    return CacheActionResponse(ok=True, message="Cache statistics reset")
