"""Unit tests for the Redis-backed counter store."""

import pytest
from fakeredis import FakeServer, aioredis

from analytics_api.adapters.store.redis_store import CounterStore
from analytics_api.core.config import RedisSettings
from analytics_api.core.errors import StoreUnavailableError


@pytest.mark.asyncio
async def test_counter_operations(store: CounterStore) -> None:
    assert await store.get("k") is None
    assert await store.setnx("k", 5) is True
    assert await store.setnx("k", 9) is False
    assert await store.decr("k") == 4
    assert await store.incr("k") == 5
    await store.set("k", 2)
    assert await store.get("k") == "2"


@pytest.mark.asyncio
async def test_list_operations_keep_most_recent_first(store: CounterStore) -> None:
    await store.lpush("log", 1)
    await store.lpush("log", 2)
    await store.lpush("log", 3)

    assert await store.lrange("log", 0, -1) == ["3", "2", "1"]

    await store.ltrim("log", 0, 1)
    assert await store.lrange("log", 0, -1) == ["3", "2"]


@pytest.mark.asyncio
async def test_pexpire_and_delete(store: CounterStore, fake_redis) -> None:
    await store.set("k", 1)
    assert await store.pexpire("k", 5000) is True
    assert 0 < await fake_redis.pttl("k") <= 5000

    assert await store.delete("k") == 1
    assert await store.get("k") is None


@pytest.mark.asyncio
async def test_run_script_is_atomic_unit(store: CounterStore) -> None:
    script = store.register_script("return redis.call('INCRBY', KEYS[1], ARGV[1])")

    assert await store.run_script(script, keys=["n"], args=[3]) == 3
    assert await store.run_script(script, keys=["n"], args=[4]) == 7


@pytest.mark.asyncio
async def test_connection_failure_raises_store_unavailable() -> None:
    server = FakeServer()
    server.connected = False
    store = CounterStore(aioredis.FakeRedis(server=server, decode_responses=True))

    with pytest.raises(StoreUnavailableError) as exc_info:
        await store.get("k")

    assert exc_info.value.code == "store_unavailable"
    assert exc_info.value.details == {"operation": "get"}


def test_dsn_prefers_explicit_url() -> None:
    cfg = RedisSettings(url="redis://example:6380/2", host="ignored")
    assert cfg.dsn == "redis://example:6380/2"


def test_dsn_built_from_parts() -> None:
    cfg = RedisSettings(url=None, host="cache", port=6390, password="pw", db=1)
    assert cfg.dsn == "redis://:pw@cache:6390/1"

    no_auth = RedisSettings(url=None, host="cache", port=6390, password=None, db=0)
    assert no_auth.dsn == "redis://cache:6390/0"
