"""Rate limiter interfaces.

Request handling depends on this abstraction only. Each concrete limiter
keeps its state in the shared counter store, so any number of worker
processes enforce one budget per client.
"""

from __future__ import annotations

import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

from analytics_api.core.config import RateLimitSettings

Clock = Callable[[], float]


@dataclass(frozen=True)
class RateLimitConfig:
    """Process-wide throttling parameters shared by every strategy.

    Attributes:
        capacity: Max requests per window.
        window_ms: Window length in milliseconds.
        state_ttl_ms: Expiry applied to per-client keys on write (None keeps
            them forever).
        legacy_remaining_header: Report the fixed legacy remaining value on
            the sliding log fast path instead of the real count.
    """

    capacity: int = 15
    window_ms: int = 60_000
    state_ttl_ms: int | None = 120_000
    legacy_remaining_header: bool = False

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError("capacity must be >= 1")
        if self.window_ms < 1:
            raise ValueError("window_ms must be >= 1")
        if self.state_ttl_ms is not None and self.state_ttl_ms < 1:
            raise ValueError("state_ttl_ms must be >= 1 or None")

    @classmethod
    def from_settings(cls, rate_limit: RateLimitSettings) -> "RateLimitConfig":
        return cls(
            capacity=rate_limit.capacity,
            window_ms=rate_limit.window_ms,
            state_ttl_ms=rate_limit.state_ttl_ms,
            legacy_remaining_header=rate_limit.legacy_remaining_header,
        )


@dataclass(frozen=True)
class RateLimitResult:
    """Verdict of a single admission check.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Requests left for this client (never negative).
        reset_at: UNIX epoch seconds when budget is next restored, if known.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int | None = None
    retry_after_seconds: int | None = None


def epoch_ms_to_seconds(value_ms: float) -> int:
    """Round an epoch-milliseconds instant up to whole seconds."""
    return int(math.ceil(value_ms / 1000))


class AbstractRateLimiter(ABC):
    """Interface for rate limiting strategies."""

    #: Value of the ``api`` query parameter selecting this strategy.
    version: str = ""

    def __init__(self, config: RateLimitConfig, *, clock: Clock = time.time) -> None:
        self.config = config
        self._clock = clock

    def now_ms(self) -> int:
        return int(round(self._clock() * 1000))

    def key(self, client_key: str, suffix: str) -> str:
        """Store key for a piece of this strategy's per-client state."""
        return f"{client_key}_{suffix}__v{self.version}"

    def _allowed(self, remaining: int, reset_at: int | None = None) -> RateLimitResult:
        return RateLimitResult(
            allowed=True,
            limit=self.config.capacity,
            remaining=max(0, remaining),
            reset_at=reset_at,
        )

    def _blocked(self, *, reset_at: int | None, retry_after_ms: int | None) -> RateLimitResult:
        retry_after = None
        if retry_after_ms is not None:
            retry_after = max(0, int(math.ceil(retry_after_ms / 1000)))
        return RateLimitResult(
            allowed=False,
            limit=self.config.capacity,
            remaining=0,
            reset_at=reset_at,
            retry_after_seconds=retry_after,
        )

    @abstractmethod
    async def admit(self, client_key: str) -> RateLimitResult:
        """Consume one token for ``client_key`` if any is left.

        Args:
            client_key: Identity the budget is tracked under.

        Returns:
            RateLimitResult describing whether the request may proceed.

        Raises:
            StoreUnavailableError: When the shared store cannot be reached.
        """
        raise NotImplementedError
