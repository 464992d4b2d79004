"""Delegated limiter (strategy 1).

The counting algorithm is not ours: it is the ``limits`` library (the engine
behind slowapi) running its moving-window strategy on its own asyncio Redis
storage. We only map its answer onto ``RateLimitResult``.
"""

from __future__ import annotations

import math
import time

from limits import RateLimitItemPerSecond
from limits.aio.storage import RedisStorage, Storage
from limits.aio.strategies import MovingWindowRateLimiter
from redis.exceptions import RedisError

from analytics_api.adapters.rate_limit.base import (
    AbstractRateLimiter,
    Clock,
    RateLimitConfig,
    RateLimitResult,
)
from analytics_api.core.config import RedisSettings
from analytics_api.core.errors import StoreUnavailableError


def build_limits_storage(redis_settings: RedisSettings) -> Storage:
    """Async Redis storage for ``limits`` pointing at the shared store.

    The pool is sized and timed out like the ``CounterStore`` client.
    """
    uri = redis_settings.dsn
    if uri.startswith("redis"):
        uri = f"async+{uri}"
    options: dict[str, object] = {"max_connections": redis_settings.max_connections}
    if redis_settings.socket_timeout_seconds is not None:
        options["socket_timeout"] = redis_settings.socket_timeout_seconds
    return RedisStorage(uri, implementation="redispy", **options)


class DelegatedTokenBucketRateLimiter(AbstractRateLimiter):
    """Wraps a third-party limiter backed by the shared store."""

    version = "1"

    def __init__(
        self,
        storage: Storage,
        config: RateLimitConfig,
        *,
        clock: Clock = time.time,
    ) -> None:
        super().__init__(config, clock=clock)
        self._limiter = MovingWindowRateLimiter(storage)
        self._item = RateLimitItemPerSecond(
            config.capacity,
            max(1, math.ceil(config.window_ms / 1000)),
            namespace="v1",
        )

    async def admit(self, client_key: str) -> RateLimitResult:
        try:
            allowed = await self._limiter.hit(self._item, client_key)
            stats = await self._limiter.get_window_stats(self._item, client_key)
        except RedisError as exc:
            raise StoreUnavailableError(
                code="store_unavailable",
                message="Rate limit store is unavailable. Try again later.",
                details={"strategy": self.version, "operation": "hit"},
            ) from exc

        reset_at = int(math.ceil(stats.reset_time))
        if not allowed:
            return self._blocked(
                reset_at=reset_at,
                retry_after_ms=int((stats.reset_time - self._clock()) * 1000),
            )
        return self._allowed(stats.remaining, reset_at=reset_at)
