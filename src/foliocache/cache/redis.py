# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Redis key-value store using the ``redis`` async client.

Every command runs under a short timeout.  A timeout or command error only
affects that call (the safe default is returned).  A failed first connect or
a dropped connection moves the store to ``connecting`` and starts a
background reconnect loop with capped linear backoff.  When the loop gives
up the store stays ``unavailable`` until :meth:`RedisStore.reconnect` succeeds.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

import redis.asyncio as aioredis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from foliocache.cache.base import BackendAvailability, KeyValueStore

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from foliocache.core.config import Settings

logger = logging.getLogger("foliocache.cache.redis")

T = TypeVar("T")

_BACKOFF_STEP = 0.05  # seconds added per attempt
_BACKOFF_CAP = 3.0
_SCAN_COUNT = 500


def reconnect_delay(attempt: int) -> float:
    """Delay before reconnect *attempt* (1-based): 50ms, 100ms, ... capped at 3s."""
    return min(attempt * _BACKOFF_STEP, _BACKOFF_CAP)


class RedisStore(KeyValueStore):
    """Redis-backed store using the ``redis-py`` async client.

    Args:
        client: Pre-built async client.  Built from *url* when omitted.
        url: Redis connection URL (e.g. ``redis://localhost:6379/0``).
        connect_timeout: Seconds allowed for the initial ``PING``.
        op_timeout: Seconds allowed for a single-key command.
        bulk_timeout: Seconds allowed for ``SCAN`` + ``DEL`` and ``FLUSHDB``.
        max_reconnect_attempts: Background reconnect attempts before the
            store marks itself unavailable.
    """

    def __init__(
        self,
        client: Redis | None = None,
        *,
        url: str = "redis://localhost:6379/0",
        connect_timeout: float = 10.0,
        op_timeout: float = 0.25,
        bulk_timeout: float = 5.0,
        max_reconnect_attempts: int = 10,
    ) -> None:
        self._client: Redis = client or aioredis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=connect_timeout,
        )
        self._connect_timeout = connect_timeout
        self._op_timeout = op_timeout
        self._bulk_timeout = bulk_timeout
        self._max_reconnect_attempts = max_reconnect_attempts
        self._state = BackendAvailability.UNAVAILABLE
        self._reconnect_task: asyncio.Task[None] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> RedisStore:
        if settings.redis_url:
            client = aioredis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=settings.redis_connect_timeout,
            )
        else:
            client = aioredis.Redis(
                host=settings.redis_host,
                port=settings.redis_port,
                db=settings.redis_db,
                password=settings.redis_password or None,
                ssl=settings.redis_tls,
                decode_responses=True,
                socket_connect_timeout=settings.redis_connect_timeout,
            )
        return cls(
            client,
            connect_timeout=settings.redis_connect_timeout,
            op_timeout=settings.redis_op_timeout,
            max_reconnect_attempts=settings.redis_reconnect_max_attempts,
        )

    @property
    def availability(self) -> BackendAvailability:
        return self._state

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> bool:
        self._state = BackendAvailability.CONNECTING
        if await self._ping(self._connect_timeout):
            self._state = BackendAvailability.CONNECTED
            logger.info("Redis connected")
            return True
        logger.warning("Redis connection failed; running as pass-through while retrying")
        self._start_reconnect()
        return False

    async def reconnect(self) -> bool:
        await self._cancel_reconnect()
        return await self.connect()

    async def ping(self) -> bool:
        return await self._ping(self._op_timeout)

    async def close(self) -> None:
        await self._cancel_reconnect()
        self._state = BackendAvailability.UNAVAILABLE
        try:
            await self._client.aclose()
        except RedisError as exc:
            logger.warning("Error closing Redis connection: %s", exc)

    async def _ping(self, timeout: float) -> bool:
        try:
            return bool(await asyncio.wait_for(self._client.ping(), timeout=timeout))
        except (TimeoutError, RedisError, OSError) as exc:
            logger.debug("Redis PING failed: %s", exc)
            return False

    def _on_connection_lost(self, exc: BaseException) -> None:
        if self._state is not BackendAvailability.CONNECTED:
            return
        logger.warning("Redis connection lost (%s); reconnecting", exc)
        self._start_reconnect()

    def _start_reconnect(self) -> None:
        self._state = BackendAvailability.CONNECTING
        if self._reconnect_task is None or self._reconnect_task.done():
            self._reconnect_task = asyncio.create_task(self._reconnect_loop())

    async def _reconnect_loop(self) -> None:
        for attempt in range(1, self._max_reconnect_attempts + 1):
            await asyncio.sleep(reconnect_delay(attempt))
            if await self._ping(self._connect_timeout):
                self._state = BackendAvailability.CONNECTED
                logger.info("Redis reconnected after %d attempt(s)", attempt)
                return
        self._state = BackendAvailability.UNAVAILABLE
        logger.error(
            "Redis reconnection failed after %d attempts; content cache running as pass-through",
            self._max_reconnect_attempts,
        )

    async def _cancel_reconnect(self) -> None:
        task, self._reconnect_task = self._reconnect_task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _call(
        self,
        op: str,
        command: Callable[[], Awaitable[T]],
        default: T,
        timeout: float | None = None,
    ) -> T:
        """Run *command* if connected, returning *default* on any failure."""
        if self._state is not BackendAvailability.CONNECTED:
            return default
        try:
            return await asyncio.wait_for(command(), timeout=timeout or self._op_timeout)
        except (TimeoutError, RedisTimeoutError):
            logger.debug("Redis %s timed out", op)
        except (RedisConnectionError, OSError) as exc:
            self._on_connection_lost(exc)
        except RedisError as exc:
            logger.debug("Redis %s failed: %s", op, exc)
        return default

    # ------------------------------------------------------------------
    # KeyValueStore interface
    # ------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        async def _get() -> str | None:
            result = await self._client.get(key)
            return str(result) if result is not None else None

        return await self._call("GET", _get, None)

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        async def _set() -> bool:
            await self._client.set(key, value, ex=ttl)
            return True

        return await self._call("SET", _set, False)

    async def delete(self, key: str) -> bool:
        async def _delete() -> bool:
            await self._client.delete(key)
            return True

        return await self._call("DEL", _delete, False)

    async def delete_pattern(self, pattern: str) -> bool:
        """Delete keys matching *pattern*.

        Uses SCAN rather than KEYS so a large keyspace does not block Redis.
        The sweep is not atomic across the matched keys.
        """

        async def _delete_pattern() -> bool:
            keys = [k async for k in self._client.scan_iter(match=pattern, count=_SCAN_COUNT)]
            if keys:
                await self._client.delete(*keys)
            return True

        return await self._call("SCAN/DEL", _delete_pattern, False, self._bulk_timeout)

    async def exists(self, key: str) -> bool:
        async def _exists() -> bool:
            return int(await self._client.exists(key)) == 1

        return await self._call("EXISTS", _exists, False)

    async def expire(self, key: str, ttl: int) -> bool:
        async def _expire() -> bool:
            return bool(await self._client.expire(key, ttl))

        return await self._call("EXPIRE", _expire, False)

    async def ttl(self, key: str) -> int | None:
        async def _ttl() -> int | None:
            remaining = int(await self._client.ttl(key))
            # -2: no such key, -1: no expiry
            return remaining if remaining >= 0 else None

        return await self._call("TTL", _ttl, None)

    async def increment(self, key: str) -> int:
        async def _incr() -> int:
            return int(await self._client.incr(key))

        return await self._call("INCR", _incr, 0)

    async def flush(self) -> bool:
        async def _flush() -> bool:
            await self._client.flushdb()
            logger.info("Redis database flushed")
            return True

        return await self._call("FLUSHDB", _flush, False, self._bulk_timeout)
