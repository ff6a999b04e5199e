# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Post-response cache invalidation.

The :class:`InvalidationHook` looks at the outcome of a mutation handler and,
when it succeeded, evicts the affected content types in a detached task.
The response is handed back untouched and is never delayed: invalidation
runs alongside the send, its failures are only logged, and a client that
disconnects cannot cancel it because the content has already changed.

Example::

    hook = InvalidationHook(cache)

    outcome = hook.after_response(200, {"ok": True}, [ContentType.BLOG])
    # -> InvalidationOutcome.TRIGGERED, eviction running in the background

    await hook.drain()  # on shutdown
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from foliocache.cache.content import ContentCache
    from foliocache.cache.policy import ContentType

logger = logging.getLogger("foliocache.cache.invalidation")


class InvalidationOutcome(StrEnum):
    TRIGGERED = "triggered"
    SKIPPED = "skipped"


def is_successful(status_code: int, payload: object = None) -> bool:
    """2xx status and a payload that does not say ``ok: false``."""
    if not 200 <= status_code < 300:
        return False
    if isinstance(payload, Mapping):
        return payload.get("ok") is not False
    return getattr(payload, "ok", None) is not False


class InvalidationHook:
    """Dispatches content-type invalidation after successful responses."""

    def __init__(self, cache: ContentCache) -> None:
        self._cache = cache
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        """Number of invalidation tasks still running."""
        return len(self._tasks)

    def after_response(
        self,
        status_code: int,
        payload: object,
        content_types: Iterable[ContentType | str],
    ) -> InvalidationOutcome:
        """Evaluate a finished response and schedule invalidation if it succeeded."""
        types = tuple(content_types)
        if not types or not is_successful(status_code, payload):
            logger.debug("Invalidation skipped for %s (status %d)", types, status_code)
            return InvalidationOutcome.SKIPPED
        self.schedule(types)
        return InvalidationOutcome.TRIGGERED

    def schedule(self, content_types: Iterable[ContentType | str]) -> asyncio.Task[None]:
        """Start invalidation in a task that outlives the current request."""
        task = asyncio.create_task(self.invalidate_now(content_types))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def invalidate_now(self, content_types: Iterable[ContentType | str]) -> None:
        """Invalidate *content_types* and wait for it.  Never raises."""
        types = list(dict.fromkeys(str(ct) for ct in content_types))
        await asyncio.gather(*(self._invalidate_one(ct) for ct in types))

    async def _invalidate_one(self, content_type: str) -> None:
        try:
            effective = await self._cache.invalidate_content_type(content_type)
        except Exception:
            logger.exception("Cache invalidation failed for %s", content_type)
            return
        if effective:
            logger.info("Cache invalidated for %s", content_type)

    async def drain(self) -> None:
        """Wait for all scheduled invalidations to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
