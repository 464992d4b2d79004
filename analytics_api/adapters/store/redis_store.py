"""Shared counter store backed by Redis.

A single pooled ``redis.asyncio`` client is shared by the whole process;
requests are isolated by key, not by connection. Every command failure is
surfaced as ``StoreUnavailableError`` so the HTTP layer can fail the one
request instead of the process.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Sequence

import redis.asyncio as redis
from redis.asyncio.client import Redis
from redis.commands.core import AsyncScript
from redis.exceptions import RedisError

from analytics_api.core.config import RedisSettings, settings
from analytics_api.core.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class CounterStore:
    """Thin async facade over the Redis commands the limiters need."""

    def __init__(self, client: Redis) -> None:
        self._redis = client

    @classmethod
    def from_settings(cls, redis_settings: RedisSettings) -> "CounterStore":
        """Build a store with its own connection pool.

        No connection is opened until the first command.
        """
        client = redis.from_url(
            redis_settings.dsn,
            decode_responses=True,
            max_connections=redis_settings.max_connections,
            socket_timeout=redis_settings.socket_timeout_seconds,
        )
        return cls(client)

    @property
    def client(self) -> Redis:
        return self._redis

    @asynccontextmanager
    async def _translate_errors(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except RedisError as exc:
            logger.error(
                "store.error",
                extra={"operation": operation, "error_type": type(exc).__name__},
            )
            raise StoreUnavailableError(
                code="store_unavailable",
                message="Rate limit store is unavailable. Try again later.",
                details={"operation": operation},
            ) from exc

    async def get(self, key: str) -> str | None:
        async with self._translate_errors("get"):
            return await self._redis.get(key)

    async def set(self, key: str, value: Any, *, px: int | None = None) -> None:
        async with self._translate_errors("set"):
            await self._redis.set(key, value, px=px)

    async def setnx(self, key: str, value: Any) -> bool:
        async with self._translate_errors("setnx"):
            return bool(await self._redis.setnx(key, value))

    async def incr(self, key: str) -> int:
        async with self._translate_errors("incr"):
            return int(await self._redis.incr(key))

    async def decr(self, key: str) -> int:
        async with self._translate_errors("decr"):
            return int(await self._redis.decr(key))

    async def lpush(self, key: str, *values: Any) -> int:
        async with self._translate_errors("lpush"):
            return int(await self._redis.lpush(key, *values))

    async def lrange(self, key: str, start: int, end: int) -> list[str]:
        async with self._translate_errors("lrange"):
            return list(await self._redis.lrange(key, start, end))

    async def ltrim(self, key: str, start: int, end: int) -> None:
        async with self._translate_errors("ltrim"):
            await self._redis.ltrim(key, start, end)

    async def pexpire(self, key: str, ttl_ms: int) -> bool:
        async with self._translate_errors("pexpire"):
            return bool(await self._redis.pexpire(key, ttl_ms))

    async def delete(self, *keys: str) -> int:
        async with self._translate_errors("delete"):
            return int(await self._redis.delete(*keys))

    async def ping(self) -> bool:
        async with self._translate_errors("ping"):
            return bool(await self._redis.ping())

    def register_script(self, source: str) -> AsyncScript:
        """Register a Lua script; it is loaded lazily on first call."""
        return self._redis.register_script(source)

    async def run_script(
        self,
        script: AsyncScript,
        *,
        keys: Sequence[str],
        args: Sequence[Any],
    ) -> Any:
        """Run a registered script atomically on the server."""
        async with self._translate_errors("script"):
            return await script(keys=list(keys), args=list(args))

    async def close(self) -> None:
        await self._redis.aclose()


_store: CounterStore | None = None


def get_counter_store() -> CounterStore:
    """Return the process-wide store, creating its pool on first use."""
    global _store
    if _store is None:
        _store = CounterStore.from_settings(settings.redis)
    return _store


async def close_counter_store() -> None:
    """Release the pooled connections (application shutdown)."""
    global _store
    if _store is not None:
        await _store.close()
        _store = None
