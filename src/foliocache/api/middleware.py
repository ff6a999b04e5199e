# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Request logging and X-Request-ID tracking."""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("foliocache.api.middleware")


class RequestMiddleware(BaseHTTPMiddleware):
    """Logs each request with its duration and cache backend state."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        start = time.monotonic()

        response = await call_next(request)

        duration_ms = round((time.monotonic() - start) * 1000, 1)
        response.headers["X-Request-ID"] = request_id

        cache = getattr(request.app.state, "content_cache", None)
        cache_backend = cache.availability.value if cache is not None else "-"
        logger.info(
            "%s %s %s %.1fms cache=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            cache_backend,
            extra={"request_id": request_id, "cache_backend": cache_backend},
        )

        return response
