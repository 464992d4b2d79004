"""Sliding window log limiter (strategy 2, the default).

State per client, both under the client's identity string ``K``:

- ``K_remainingTokens__v2``: tokens left before the log has to be consulted.
- ``K_timestamps__v2``: epoch-ms instants of admitted requests, most recent
  first, never longer than ``capacity`` entries.

While tokens remain a request only decrements the counter and logs its
instant. Once they run out, the log is filtered down to entries younger
than the window and the counter is rebuilt from what is left, so the budget
frees up exactly as old requests slide out of the trailing window.
"""

from __future__ import annotations

import time

from analytics_api.adapters.rate_limit.base import (
    AbstractRateLimiter,
    Clock,
    RateLimitConfig,
    RateLimitResult,
    epoch_ms_to_seconds,
)
from analytics_api.adapters.rate_limit.scripts import SLIDING_LOG_SCRIPT
from analytics_api.adapters.store.redis_store import CounterStore

# X-RateLimit-Remaining the original fast path always reported.
LEGACY_FAST_PATH_REMAINING = 56


class SlidingWindowLogRateLimiter(AbstractRateLimiter):
    """Per-client log of request instants over a trailing window."""

    version = "2"

    def __init__(
        self,
        store: CounterStore,
        config: RateLimitConfig,
        *,
        clock: Clock = time.time,
    ) -> None:
        super().__init__(config, clock=clock)
        self._store = store
        self._script = store.register_script(SLIDING_LOG_SCRIPT)

    async def admit(self, client_key: str) -> RateLimitResult:
        now = self.now_ms()
        allowed, remaining, fast_path, oldest = await self._store.run_script(
            self._script,
            keys=[
                self.key(client_key, "remainingTokens"),
                self.key(client_key, "timestamps"),
            ],
            args=[
                self.config.capacity,
                self.config.window_ms,
                now,
                self.config.state_ttl_ms or 0,
            ],
        )
        reset_ms = int(oldest) + self.config.window_ms

        if not int(allowed):
            return self._blocked(
                reset_at=epoch_ms_to_seconds(reset_ms),
                retry_after_ms=reset_ms - now,
            )

        if int(fast_path) and self.config.legacy_remaining_header:
            remaining = LEGACY_FAST_PATH_REMAINING
        else:
            remaining = int(remaining)
        return self._allowed(remaining, reset_at=epoch_ms_to_seconds(reset_ms))

    async def timestamps(self, client_key: str) -> list[int]:
        """Logged instants for a client, most recent first."""
        raw = await self._store.lrange(self.key(client_key, "timestamps"), 0, -1)
        return [int(ts) for ts in raw]
