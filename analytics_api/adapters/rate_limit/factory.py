"""Construction and selection of rate limiting strategies."""

from __future__ import annotations

import time
from typing import Mapping

from limits.aio.storage import Storage

from analytics_api.adapters.rate_limit.base import AbstractRateLimiter, Clock, RateLimitConfig
from analytics_api.adapters.rate_limit.fixed_window import GreedyFixedWindowRateLimiter
from analytics_api.adapters.rate_limit.sliding_log import SlidingWindowLogRateLimiter
from analytics_api.adapters.rate_limit.token_bucket import (
    DelegatedTokenBucketRateLimiter,
    build_limits_storage,
)
from analytics_api.adapters.store.redis_store import CounterStore, get_counter_store
from analytics_api.core.config import settings

RateLimiters = Mapping[str, AbstractRateLimiter]

_limiters: dict[str, AbstractRateLimiter] | None = None
_limiters_config: RateLimitConfig | None = None
_limits_storage: Storage | None = None


def build_rate_limiters(
    store: CounterStore,
    storage: Storage,
    config: RateLimitConfig,
    *,
    clock: Clock = time.time,
) -> dict[str, AbstractRateLimiter]:
    """Instantiate every strategy, keyed by its ``api`` selector value."""
    limiters: list[AbstractRateLimiter] = [
        DelegatedTokenBucketRateLimiter(storage, config, clock=clock),
        SlidingWindowLogRateLimiter(store, config, clock=clock),
        GreedyFixedWindowRateLimiter(store, config, clock=clock),
    ]
    return {limiter.version: limiter for limiter in limiters}


def get_rate_limiters() -> RateLimiters:
    """Return the process-wide strategies.

    Built once and cached; rebuilt if the throttling configuration changes
    (primarily in tests). A rebuild reuses the store connections.
    """
    global _limiters, _limiters_config

    config = RateLimitConfig.from_settings(settings.rate_limit)
    if _limiters is None or _limiters_config != config:
        _limiters = build_rate_limiters(
            get_counter_store(),
            get_limits_storage(),
            config,
        )
        _limiters_config = config
    return _limiters


def get_limits_storage() -> Storage:
    """Process-wide ``limits`` storage for the delegated strategy."""
    global _limits_storage

    if _limits_storage is None:
        _limits_storage = build_limits_storage(settings.redis)
    return _limits_storage


def reset_rate_limiters() -> None:
    global _limiters, _limiters_config, _limits_storage
    _limiters = None
    _limiters_config = None
    _limits_storage = None


def select_rate_limiter(
    api: str | None,
    limiters: RateLimiters,
    *,
    default: str | None = None,
) -> AbstractRateLimiter:
    """Pick the strategy named by the ``api`` parameter.

    Anything other than a known selector, including no value at all, falls
    back to the default strategy.
    """
    fallback = default or settings.rate_limit.default_strategy
    if api is not None and api in limiters:
        return limiters[api]
    return limiters[fallback]
