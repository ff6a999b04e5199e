# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""FastAPI dependencies for objects owned by the application factory."""

from __future__ import annotations

from fastapi import Request

from foliocache.cache.content import ContentCache
from foliocache.cache.invalidation import InvalidationHook
from foliocache.content.source import JsonFileContentSource


def get_content_cache(request: Request) -> ContentCache:
    return request.app.state.content_cache


def get_invalidation_hook(request: Request) -> InvalidationHook:
    return request.app.state.invalidation_hook


def get_content_source(request: Request) -> JsonFileContentSource:
    return request.app.state.content_source
