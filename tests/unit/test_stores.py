# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the key-value stores: memory, null object and Redis."""

from __future__ import annotations

import asyncio
import time
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError

from foliocache.cache.base import BackendAvailability, KeyValueStore, NullStore
from foliocache.cache.memory import MemoryStore
from foliocache.cache.redis import RedisStore, reconnect_delay
from foliocache.core.config import Settings

# ---------------------------------------------------------------------------
# Abstract base class contract
# ---------------------------------------------------------------------------


class TestKeyValueStoreInterface:
    def test_is_subclass(self) -> None:
        assert issubclass(MemoryStore, KeyValueStore)
        assert issubclass(NullStore, KeyValueStore)
        assert issubclass(RedisStore, KeyValueStore)


# ---------------------------------------------------------------------------
# MemoryStore
# ---------------------------------------------------------------------------


class TestMemoryStore:
    async def test_get_set(self, memory_store: MemoryStore) -> None:
        assert await memory_store.set("k1", "v1") is True
        assert await memory_store.get("k1") == "v1"

    async def test_get_missing(self, memory_store: MemoryStore) -> None:
        assert await memory_store.get("nonexistent") is None

    async def test_exists(self, memory_store: MemoryStore) -> None:
        assert await memory_store.exists("k1") is False
        await memory_store.set("k1", "v1")
        assert await memory_store.exists("k1") is True

    async def test_delete_is_idempotent(self, memory_store: MemoryStore) -> None:
        await memory_store.set("k1", "v1")
        assert await memory_store.delete("k1") is True
        assert await memory_store.delete("k1") is True
        assert await memory_store.get("k1") is None

    async def test_delete_pattern(self, memory_store: MemoryStore) -> None:
        for key in ("blog:p1", "blog:p2", "blog:list", "hero:all"):
            await memory_store.set(key, "v")

        assert await memory_store.delete_pattern("blog:*") is True

        assert await memory_store.get("blog:p2") is None
        assert memory_store.keys() == ["hero:all"]

    async def test_delete_pattern_without_matches(self, memory_store: MemoryStore) -> None:
        await memory_store.set("hero:all", "v")
        assert await memory_store.delete_pattern("sns:*") is True
        assert memory_store.keys() == ["hero:all"]

    async def test_delete_pattern_route_keys(self, memory_store: MemoryStore) -> None:
        await memory_store.set("/api/content/blog", "list")
        await memory_store.set("/api/content/blog/p1", "post")
        await memory_store.set("/api/content/blogroll", "other")

        await memory_store.delete_pattern("/api/content/blog")
        await memory_store.delete_pattern("/api/content/blog/*")

        assert memory_store.keys() == ["/api/content/blogroll"]

    async def test_ttl_expiry(self, memory_store: MemoryStore) -> None:
        await memory_store.set("k1", "v1", ttl=60)
        assert await memory_store.get("k1") == "v1"

        memory_store._store["k1"].expires_at = time.monotonic() - 1

        assert await memory_store.get("k1") is None
        assert await memory_store.exists("k1") is False

    async def test_ttl_reports_remaining_seconds(self, memory_store: MemoryStore) -> None:
        await memory_store.set("k1", "v1", ttl=300)
        await memory_store.set("k2", "v2")
        assert 299 <= await memory_store.ttl("k1") <= 300
        assert await memory_store.ttl("k2") is None
        assert await memory_store.ttl("missing") is None

    async def test_expire(self, memory_store: MemoryStore) -> None:
        await memory_store.set("k1", "v1", ttl=300)
        assert await memory_store.expire("k1", 10) is True
        assert await memory_store.ttl("k1") <= 10
        assert await memory_store.expire("missing", 10) is False

    async def test_increment(self, memory_store: MemoryStore) -> None:
        assert await memory_store.increment("views") == 1
        assert await memory_store.increment("views") == 2
        assert await memory_store.get("views") == "2"

    async def test_increment_non_integer_fails_soft(self, memory_store: MemoryStore) -> None:
        await memory_store.set("views", "abc")
        assert await memory_store.increment("views") == 0
        assert await memory_store.get("views") == "abc"

    async def test_lru_eviction(self) -> None:
        store = MemoryStore(max_size=3)
        await store.set("a", "1")
        await store.set("b", "2")
        await store.set("c", "3")
        await store.get("a")
        await store.set("d", "4")

        assert await store.get("a") == "1"
        assert await store.get("b") is None

    async def test_flush(self, memory_store: MemoryStore) -> None:
        await memory_store.set("a", "1")
        await memory_store.set("b", "2")
        assert await memory_store.flush() is True
        assert memory_store.keys() == []

    async def test_closed_store_degrades_to_defaults(self, memory_store: MemoryStore) -> None:
        await memory_store.set("k1", "v1")
        await memory_store.close()

        assert memory_store.availability is BackendAvailability.UNAVAILABLE
        assert await memory_store.get("k1") is None
        assert await memory_store.set("k1", "v1") is False
        assert await memory_store.delete("k1") is False
        assert await memory_store.delete_pattern("*") is False
        assert await memory_store.increment("n") == 0

        assert await memory_store.connect() is True
        assert memory_store.available


# ---------------------------------------------------------------------------
# NullStore
# ---------------------------------------------------------------------------


class TestNullStore:
    async def test_every_operation_is_a_safe_no_op(self) -> None:
        store = NullStore()
        assert store.availability is BackendAvailability.UNAVAILABLE
        assert await store.connect() is False
        assert await store.get("k") is None
        assert await store.set("k", "v", ttl=10) is False
        assert await store.delete("k") is False
        assert await store.delete_pattern("k*") is False
        assert await store.exists("k") is False
        assert await store.expire("k", 10) is False
        assert await store.ttl("k") is None
        assert await store.increment("k") == 0
        assert await store.flush() is False
        assert await store.ping() is False


# ---------------------------------------------------------------------------
# RedisStore — against a mocked async client
# ---------------------------------------------------------------------------


def _mock_client() -> MagicMock:
    client = MagicMock()
    client.ping = AsyncMock(return_value=True)
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=1)
    client.exists = AsyncMock(return_value=1)
    client.expire = AsyncMock(return_value=True)
    client.ttl = AsyncMock(return_value=120)
    client.incr = AsyncMock(return_value=7)
    client.flushdb = AsyncMock(return_value=True)
    client.aclose = AsyncMock()
    return client


def _scan(*keys: str):
    async def _iter(*_args, **_kwargs):
        for key in keys:
            yield key

    return _iter


@pytest.fixture
def no_backoff(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("foliocache.cache.redis.reconnect_delay", lambda attempt: 0)


class TestReconnectDelay:
    def test_linear_steps(self) -> None:
        assert reconnect_delay(1) == pytest.approx(0.05)
        assert reconnect_delay(4) == pytest.approx(0.2)

    def test_capped_at_three_seconds(self) -> None:
        assert reconnect_delay(60) == 3.0
        assert reconnect_delay(1000) == 3.0


class TestRedisStore:
    async def test_starts_unavailable_until_connected(self) -> None:
        store = RedisStore(_mock_client())
        assert store.availability is BackendAvailability.UNAVAILABLE
        assert await store.get("k") is None

        assert await store.connect() is True
        assert store.availability is BackendAvailability.CONNECTED

    async def test_connect_failure_is_soft(self, no_backoff: None) -> None:
        client = _mock_client()
        client.ping.side_effect = RedisConnectionError("refused")
        store = RedisStore(client, max_reconnect_attempts=2)

        assert await store.connect() is False
        assert store.availability is BackendAvailability.CONNECTING
        assert await store.set("k", "v", ttl=10) is False
        client.set.assert_not_awaited()

        await store._reconnect_task
        assert store.availability is BackendAvailability.UNAVAILABLE
        assert client.ping.await_count == 3

    async def test_failed_first_connect_keeps_retrying(self, no_backoff: None) -> None:
        client = _mock_client()
        client.ping.side_effect = [RedisConnectionError("loading"), True]
        store = RedisStore(client)

        assert await store.connect() is False
        await store._reconnect_task

        assert store.availability is BackendAvailability.CONNECTED
        assert client.ping.await_count == 2
        assert await store.set("k", "v") is True

    async def test_close_stops_pending_retries(self) -> None:
        client = _mock_client()
        client.ping.side_effect = RedisConnectionError("refused")
        store = RedisStore(client)
        await store.connect()
        task = store._reconnect_task

        await store.close()

        assert task.cancelled()
        assert store.availability is BackendAvailability.UNAVAILABLE

    async def test_set_passes_ttl(self) -> None:
        client = _mock_client()
        store = RedisStore(client)
        await store.connect()

        assert await store.set("blog:p1", "{}", ttl=3600) is True
        client.set.assert_awaited_once_with("blog:p1", "{}", ex=3600)

    async def test_get_returns_value(self) -> None:
        client = _mock_client()
        client.get.return_value = "cached"
        store = RedisStore(client)
        await store.connect()

        assert await store.get("blog:p1") == "cached"

    async def test_delete_pattern_scans_then_deletes(self) -> None:
        client = _mock_client()
        client.scan_iter = MagicMock(side_effect=_scan("blog:p1", "blog:p2", "blog:list"))
        store = RedisStore(client)
        await store.connect()

        assert await store.delete_pattern("blog:*") is True
        client.scan_iter.assert_called_once_with(match="blog:*", count=500)
        client.delete.assert_awaited_once_with("blog:p1", "blog:p2", "blog:list")

    async def test_delete_pattern_without_matches(self) -> None:
        client = _mock_client()
        client.scan_iter = MagicMock(side_effect=_scan())
        store = RedisStore(client)
        await store.connect()

        assert await store.delete_pattern("sns:*") is True
        client.delete.assert_not_awaited()

    async def test_ttl_sentinels_map_to_none(self) -> None:
        client = _mock_client()
        store = RedisStore(client)
        await store.connect()

        assert await store.ttl("k") == 120
        client.ttl.return_value = -1
        assert await store.ttl("k") is None
        client.ttl.return_value = -2
        assert await store.ttl("k") is None

    async def test_exists_expire_increment_flush(self) -> None:
        client = _mock_client()
        store = RedisStore(client)
        await store.connect()

        assert await store.exists("k") is True
        assert await store.expire("k", 30) is True
        assert await store.increment("views") == 7
        assert await store.flush() is True
        client.flushdb.assert_awaited_once()

    async def test_command_error_returns_default_and_stays_connected(self) -> None:
        client = _mock_client()
        client.get.side_effect = ResponseError("WRONGTYPE")
        store = RedisStore(client)
        await store.connect()

        assert await store.get("k") is None
        assert store.availability is BackendAvailability.CONNECTED

    async def test_timeout_returns_default_for_that_call(self) -> None:
        async def _slow(*_args, **_kwargs):
            await asyncio.sleep(1)

        client = _mock_client()
        client.get.side_effect = _slow
        store = RedisStore(client, op_timeout=0.01)
        await store.connect()

        assert await store.get("k") is None
        assert store.availability is BackendAvailability.CONNECTED

    async def test_connection_loss_reconnects(self, no_backoff: None) -> None:
        client = _mock_client()
        client.get.side_effect = RedisConnectionError("reset by peer")
        store = RedisStore(client)
        await store.connect()

        assert await store.get("k") is None
        assert store.availability is BackendAvailability.CONNECTING

        await store._reconnect_task
        assert store.availability is BackendAvailability.CONNECTED

    async def test_gives_up_after_bounded_attempts(self, no_backoff: None) -> None:
        client = _mock_client()
        client.set.side_effect = RedisConnectionError("reset by peer")
        store = RedisStore(client, max_reconnect_attempts=3)
        await store.connect()
        client.ping.side_effect = RedisConnectionError("refused")

        assert await store.set("k", "v") is False
        await store._reconnect_task

        assert store.availability is BackendAvailability.UNAVAILABLE
        # initial connect + three reconnect attempts
        assert client.ping.await_count == 4

        client.ping.side_effect = None
        assert await store.reconnect() is True
        assert store.availability is BackendAvailability.CONNECTED

    async def test_close(self) -> None:
        client = _mock_client()
        store = RedisStore(client)
        await store.connect()

        await store.close()
        assert store.availability is BackendAvailability.UNAVAILABLE
        client.aclose.assert_awaited_once()

    def test_from_settings_builds_client(self) -> None:
        settings = Settings(
            _env_file=None, redis_host="cache.internal", redis_port=6380, redis_op_timeout=0.5
        )
        store = RedisStore.from_settings(settings)
        assert store.availability is BackendAvailability.UNAVAILABLE
        assert store._op_timeout == 0.5
