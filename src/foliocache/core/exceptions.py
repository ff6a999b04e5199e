# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Custom exception hierarchy for foliocache."""


class FolioCacheError(Exception):
    """Base exception for all foliocache errors."""


class ConfigurationError(FolioCacheError):
    """Invalid or missing configuration."""


class UnknownContentTypeError(FolioCacheError):
    """A content type name is not part of the cache policy."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown content type: {name}")
        self.name = name


class ContentNotFoundError(FolioCacheError):
    """The content source has no document for the requested type or item."""
