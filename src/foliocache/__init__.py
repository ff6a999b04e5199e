# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""foliocache - content caching and invalidation for a content-managed portfolio site."""

__version__ = "0.1.0"
