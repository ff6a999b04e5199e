# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""FastAPI application factory.

The factory is the composition root: it builds the key-value store, the
content cache, the invalidation hook and the content source, and hangs them
on ``app.state`` for the route dependencies in :mod:`foliocache.api.deps`.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from foliocache import __version__
from foliocache.api.middleware import RequestMiddleware
from foliocache.api.routes import cache, content, health
from foliocache.cache.base import KeyValueStore
from foliocache.cache.content import ContentCache, create_content_cache
from foliocache.cache.invalidation import InvalidationHook
from foliocache.content.source import JsonFileContentSource
from foliocache.core.config import Settings, get_settings

logger = logging.getLogger("foliocache.api.app")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    content_cache: ContentCache = app.state.content_cache
    hook: InvalidationHook = app.state.invalidation_hook

    # Fail-soft: an unreachable backend leaves the cache in pass-through mode.
    await content_cache.store.connect()
    if app.state.settings.warm_on_startup:
        report = await content_cache.warm_cache()
        if not report.ok:
            logger.warning("Starting with a partially cold cache: %s", sorted(report.failed))

    yield

    await hook.drain()
    await content_cache.close()


def register_loaders(content_cache: ContentCache, source: JsonFileContentSource) -> None:
    """Register a whole-collection loader for every type the source holds."""
    for content_type in source.available_types():
        content_cache.register_loader(content_type, source.loader(content_type))


def create_app(
    settings: Settings | None = None,
    *,
    store: KeyValueStore | None = None,
    content_source: JsonFileContentSource | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    content_cache = create_content_cache(settings, store=store)
    source = content_source or JsonFileContentSource(settings.content_dir)
    register_loaders(content_cache, source)

    app = FastAPI(
        title="foliocache",
        description="Content caching and invalidation service",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    app.state.settings = settings
    app.state.content_cache = content_cache
    app.state.invalidation_hook = InvalidationHook(content_cache)
    app.state.content_source = source

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(content.router, prefix="/api", tags=["content"])
    app.include_router(cache.router, prefix="/api/admin", tags=["cache"])
    app.add_middleware(RequestMiddleware)

    return app
