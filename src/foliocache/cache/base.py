# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Abstract key-value store interface with TTL support.

Stores never raise on backend trouble.  Every operation degrades to a safe
default (``None`` / ``False`` / ``0``) and the failure is logged, so that an
unreachable cache can never turn into a failed content read.
"""

from __future__ import annotations

import abc
from enum import StrEnum


class BackendAvailability(StrEnum):
    CONNECTED = "connected"
    CONNECTING = "connecting"
    UNAVAILABLE = "unavailable"


class KeyValueStore(abc.ABC):
    """Abstract base class for key-value backends.

    All backends support async get/set/delete/exists operations with a TTL
    in seconds, glob-style pattern deletion, and report their
    :class:`BackendAvailability`.
    """

    @property
    @abc.abstractmethod
    def availability(self) -> BackendAvailability:
        """Current connection state of the backend."""

    @property
    def available(self) -> bool:
        return self.availability is BackendAvailability.CONNECTED

    @abc.abstractmethod
    async def connect(self) -> bool:
        """Establish the backend connection.

        Returns:
            ``True`` if the backend is usable afterwards.  Failure is logged,
            never raised.
        """

    async def reconnect(self) -> bool:
        """Explicitly retry a connection that previously gave up."""
        return await self.connect()

    @abc.abstractmethod
    async def get(self, key: str) -> str | None:
        """Retrieve a value by key.

        Returns:
            The stored string, or ``None`` when the key is absent, expired,
            or the backend is unavailable.
        """

    @abc.abstractmethod
    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        """Store a value.

        Args:
            key: Cache key.
            value: String value to store.
            ttl: Time-to-live in seconds.  ``None`` means no expiry.

        Returns:
            ``False`` if the value was not stored.
        """

    @abc.abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a key.

        Returns:
            ``True`` if the delete was carried out (whether or not the key
            existed), ``False`` if the backend could not be reached.
        """

    @abc.abstractmethod
    async def delete_pattern(self, pattern: str) -> bool:
        """Delete every key matching a glob pattern.

        Zero matches is a successful no-op.
        """

    @abc.abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether a key exists (and has not expired)."""

    @abc.abstractmethod
    async def expire(self, key: str, ttl: int) -> bool:
        """Reset the TTL of an existing key."""

    @abc.abstractmethod
    async def ttl(self, key: str) -> int | None:
        """Remaining time-to-live in seconds.

        Returns:
            ``None`` when the key is absent, has no expiry, or the backend is
            unavailable.
        """

    @abc.abstractmethod
    async def increment(self, key: str) -> int:
        """Atomically increment an integer counter, returning the new value.

        Returns ``0`` when the backend is unavailable.
        """

    @abc.abstractmethod
    async def flush(self) -> bool:
        """Remove every key in the store's namespace.  Admin only."""

    async def ping(self) -> bool:
        return self.available

    @abc.abstractmethod
    async def close(self) -> None:
        """Release any resources held by the backend."""


class NullStore(KeyValueStore):
    """Null-object store used when no backend can be reached.

    Always reports ``unavailable`` so the content cache runs as a pure
    pass-through.
    """

    @property
    def availability(self) -> BackendAvailability:
        return BackendAvailability.UNAVAILABLE

    async def connect(self) -> bool:
        return False

    async def get(self, key: str) -> str | None:
        return None

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        return False

    async def delete(self, key: str) -> bool:
        return False

    async def delete_pattern(self, pattern: str) -> bool:
        return False

    async def exists(self, key: str) -> bool:
        return False

    async def expire(self, key: str, ttl: int) -> bool:
        return False

    async def ttl(self, key: str) -> int | None:
        return None

    async def increment(self, key: str) -> int:
        return 0

    async def flush(self) -> bool:
        return False

    async def close(self) -> None:
        return None
