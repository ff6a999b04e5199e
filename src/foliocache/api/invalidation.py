# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Route-level hook that invalidates cached content after successful mutations.

Mark an endpoint with :func:`invalidates` and register it on a router built
with ``route_class=InvalidatingRoute``::

    router = APIRouter(route_class=InvalidatingRoute)

    @router.put("/admin/content/blog")
    @invalidates(ContentType.BLOG)
    async def update_blog(...): ...

    @router.post("/admin/content/publish")
    @invalidates(ContentType.BLOG, ContentType.SNS, ContentType.HERO)
    async def publish(...): ...

The route wraps the endpoint's response, hands it to the application's
:class:`~foliocache.cache.invalidation.InvalidationHook` for evaluation, and
returns it unchanged.  Invalidation runs in the background.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from fastapi import Request, Response
from fastapi.routing import APIRoute

from foliocache.api.deps import get_invalidation_hook
from foliocache.cache.policy import ContentType

logger = logging.getLogger("foliocache.api.invalidation")

F = TypeVar("F", bound=Callable[..., Any])

_MARKER = "__invalidates__"


class _Targets:
    __slots__ = ("content_types", "path_param")

    def __init__(
        self, content_types: tuple[ContentType | str, ...], path_param: str | None
    ) -> None:
        self.content_types = content_types
        self.path_param = path_param

    def resolve(self, request: Request) -> list[ContentType | str]:
        types: list[ContentType | str] = list(self.content_types)
        if self.path_param is not None:
            value = request.path_params.get(self.path_param)
            if value:
                types.append(str(value))
        return types


def invalidates(
    *content_types: ContentType | str, path_param: str | None = None
) -> Callable[[F], F]:
    """Declare the content types an endpoint mutates.

    Args:
        content_types: Types to invalidate after a successful response.
        path_param: Also invalidate the type named by this path parameter.
    """

    def decorator(endpoint: F) -> F:
        setattr(endpoint, _MARKER, _Targets(tuple(content_types), path_param))
        return endpoint

    return decorator


def _payload(response: Response) -> object:
    """Decode a JSON response body; anything else yields ``None``."""
    body = getattr(response, "body", None)
    content_type = response.media_type or response.headers.get("content-type", "")
    if not body or "json" not in content_type:
        return None
    try:
        return json.loads(body)
    except ValueError:
        return None


class InvalidatingRoute(APIRoute):
    """API route that reports finished responses to the invalidation hook."""

    def get_route_handler(self) -> Callable[[Request], Any]:
        handler = super().get_route_handler()
        targets: _Targets | None = getattr(self.endpoint, _MARKER, None)
        if targets is None:
            return handler

        async def invalidating_handler(request: Request) -> Response:
            response: Response = await handler(request)
            outcome = get_invalidation_hook(request).after_response(
                response.status_code, _payload(response), targets.resolve(request)
            )
            logger.debug("%s %s: invalidation %s", request.method, request.url.path, outcome)
            return response

        return invalidating_handler
