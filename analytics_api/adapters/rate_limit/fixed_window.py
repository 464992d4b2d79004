"""Greedy fixed window limiter (strategy 3).

Only the start of the current window is remembered, not every request.
Once the tokens run out, the next request past ``window_ms`` after that
start refills the budget in one go. Because the window is anchored at the
first request of a cycle rather than rolling, a burst at the end of one
window followed by a burst at the start of the next can exceed ``capacity``
within a trailing window. That is the accepted cost of keeping one counter
and one instant per client.

Keys: ``K_remainingTokens__v3`` and ``K_timestamp__v3``.
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
from analytics_api.adapters.rate_limit.scripts import FIXED_WINDOW_SCRIPT
from analytics_api.adapters.store.redis_store import CounterStore


class GreedyFixedWindowRateLimiter(AbstractRateLimiter):
    """Token counter reset wholesale once its window has expired."""

    version = "3"

    def __init__(
        self,
        store: CounterStore,
        config: RateLimitConfig,
        *,
        clock: Clock = time.time,
    ) -> None:
        super().__init__(config, clock=clock)
        self._store = store
        self._script = store.register_script(FIXED_WINDOW_SCRIPT)

    async def admit(self, client_key: str) -> RateLimitResult:
        now = self.now_ms()
        allowed, remaining, window_start = await self._store.run_script(
            self._script,
            keys=[
                self.key(client_key, "remainingTokens"),
                self.key(client_key, "timestamp"),
            ],
            args=[
                self.config.capacity,
                self.config.window_ms,
                now,
                self.config.state_ttl_ms or 0,
            ],
        )
        reset_ms = int(window_start) + self.config.window_ms

        if int(allowed):
            return self._allowed(int(remaining), reset_at=epoch_ms_to_seconds(reset_ms))
        # The refill needs now - start to strictly exceed the window.
        return self._blocked(
            reset_at=epoch_ms_to_seconds(reset_ms),
            retry_after_ms=reset_ms - now + 1,
        )
