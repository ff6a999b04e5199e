# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Cache policy: content types, TTL classes and key layout.

The policy is the single place that knows how long each kind of content
stays fresh and how its keys are named, so the content cache and the
invalidation hook never hardcode either.

Key format: the default prefix is ``"{content_type}:"``.  The whole collection
lives at ``{prefix}all`` and single items under ``{prefix}item:{identifier}``,
so no item identifier can address the collection entry::

    blog:all        # the full blog list
    blog:item:p1    # a single post
    blog:item:all   # a post whose id is "all"
    hero:all
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import TYPE_CHECKING

from foliocache.core.exceptions import UnknownContentTypeError

if TYPE_CHECKING:
    from foliocache.core.config import Settings


class ContentType(StrEnum):
    HERO = "hero"
    BLOG = "blog"
    PROJECTS = "projects"
    SNS = "sns"
    CONTACT = "contact"
    MEDIA = "media"
    MUSIC = "music"
    SETTINGS = "settings"

    @classmethod
    def parse(cls, name: str) -> ContentType | None:
        """Return the member for *name*, or ``None`` for unknown names."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None

    @classmethod
    def require(cls, name: str) -> ContentType:
        """Return the member for *name* or raise :class:`UnknownContentTypeError`."""
        member = cls.parse(name)
        if member is None:
            raise UnknownContentTypeError(name)
        return member


class TTLClass(StrEnum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"
    WEEK = "week"


DEFAULT_TTL_SECONDS: dict[TTLClass, int] = {
    TTLClass.SHORT: 300,
    TTLClass.MEDIUM: 3600,
    TTLClass.LONG: 86400,
    TTLClass.WEEK: 604800,
}

DEFAULT_TTL_CLASSES: dict[ContentType, TTLClass] = {
    ContentType.HERO: TTLClass.LONG,
    ContentType.BLOG: TTLClass.MEDIUM,
    ContentType.PROJECTS: TTLClass.MEDIUM,
    ContentType.SNS: TTLClass.SHORT,
    ContentType.CONTACT: TTLClass.LONG,
    ContentType.MEDIA: TTLClass.WEEK,
    ContentType.MUSIC: TTLClass.LONG,
    ContentType.SETTINGS: TTLClass.LONG,
}

# Route-level keys that hold responses for a content type and must be
# cleared together with the namespace itself.
DEFAULT_ROUTE_PATTERNS: dict[ContentType, tuple[str, ...]] = {
    ContentType.HERO: ("/api/content/hero",),
    ContentType.BLOG: ("/api/content/blog", "/api/content/blog/*"),
    ContentType.PROJECTS: ("/api/content/projects", "/api/content/projects/*"),
    ContentType.SNS: ("/api/content/sns", "/api/content/sns/*"),
    ContentType.CONTACT: ("/api/content/contact",),
    ContentType.MEDIA: ("/api/media/*",),
    ContentType.MUSIC: (
        "/api/music/playlist",
        "/api/admin/music/config",
        "/api/admin/music/tracks",
    ),
    ContentType.SETTINGS: ("/api/admin/settings",),
}

COLLECTION_ID = "all"
ITEM_SEGMENT = "item:"
FALLBACK_TTL_CLASS = TTLClass.MEDIUM


class CachePolicy:
    """Maps content types to TTL classes and key prefixes.

    Unknown content types (plain strings outside :class:`ContentType`) are
    still served: they get the ``medium`` TTL class and a prefix generated
    from their name, so keys and invalidation patterns stay scoped.

    Args:
        ttl_seconds: Seconds per TTL class; missing classes use defaults.
        ttl_classes: TTL class per content type; missing types use defaults.
        prefixes: Key prefix overrides per content type name.
        route_patterns: Route-level key patterns per content type.
    """

    def __init__(
        self,
        ttl_seconds: Mapping[TTLClass, int] | None = None,
        ttl_classes: Mapping[ContentType, TTLClass] | None = None,
        prefixes: Mapping[str, str] | None = None,
        route_patterns: Mapping[ContentType, tuple[str, ...]] | None = None,
    ) -> None:
        self._ttl_seconds = {**DEFAULT_TTL_SECONDS, **(ttl_seconds or {})}
        self._ttl_classes = {**DEFAULT_TTL_CLASSES, **(ttl_classes or {})}
        self._prefixes = {ct.value: f"{ct.value}:" for ct in ContentType}
        self._prefixes.update(prefixes or {})
        self._route_patterns = {**DEFAULT_ROUTE_PATTERNS, **(route_patterns or {})}

    @classmethod
    def from_settings(cls, settings: Settings) -> CachePolicy:
        return cls(
            ttl_seconds={
                TTLClass.SHORT: settings.ttl_short,
                TTLClass.MEDIUM: settings.ttl_medium,
                TTLClass.LONG: settings.ttl_long,
                TTLClass.WEEK: settings.ttl_week,
            },
            prefixes=settings.key_prefixes,
        )

    @property
    def content_types(self) -> tuple[ContentType, ...]:
        return tuple(ContentType)

    def ttl_class_for(self, content_type: ContentType | str) -> TTLClass:
        known = _known(content_type)
        if known is None:
            return FALLBACK_TTL_CLASS
        return self._ttl_classes.get(known, FALLBACK_TTL_CLASS)

    def ttl_for(self, content_type: ContentType | str) -> int:
        return self._ttl_seconds[self.ttl_class_for(content_type)]

    def assign(self, content_type: ContentType, ttl_class: TTLClass) -> None:
        """Move *content_type* to another TTL class.

        Only entries written afterwards pick up the new TTL.
        """
        self._ttl_classes[content_type] = ttl_class

    def prefix_for(self, content_type: ContentType | str) -> str:
        name = _name(content_type)
        return self._prefixes.get(name, f"{name}:")

    def key_for(self, content_type: ContentType | str, identifier: str | None = None) -> str:
        """Collection key when *identifier* is ``None``, otherwise the item key."""
        prefix = self.prefix_for(content_type)
        if identifier is None:
            return f"{prefix}{COLLECTION_ID}"
        return f"{prefix}{ITEM_SEGMENT}{identifier}"

    def pattern_for(self, content_type: ContentType | str) -> str:
        return f"{self.prefix_for(content_type)}*"

    def route_patterns_for(self, content_type: ContentType | str) -> tuple[str, ...]:
        known = _known(content_type)
        if known is None:
            return ()
        return self._route_patterns.get(known, ())

    def describe(self) -> dict[str, dict[str, object]]:
        """Policy table as plain data, for the admin surface."""
        return {
            ct.value: {
                "prefix": self.prefix_for(ct),
                "ttl_class": self.ttl_class_for(ct).value,
                "ttl_seconds": self.ttl_for(ct),
            }
            for ct in ContentType
        }


def _known(content_type: ContentType | str) -> ContentType | None:
    if isinstance(content_type, ContentType):
        return content_type
    return ContentType.parse(content_type)


def _name(content_type: ContentType | str) -> str:
    known = _known(content_type)
    if known is not None:
        return known.value
    return content_type.strip().lower()
