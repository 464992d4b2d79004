"""Tests for the greedy fixed window limiter (strategy 3)."""

import pytest

from analytics_api.adapters.rate_limit.base import RateLimitConfig
from analytics_api.adapters.rate_limit.fixed_window import GreedyFixedWindowRateLimiter


@pytest.fixture
def limiter(store, clock) -> GreedyFixedWindowRateLimiter:
    config = RateLimitConfig(capacity=3, window_ms=1000, state_ttl_ms=2000)
    return GreedyFixedWindowRateLimiter(store, config, clock=clock)


@pytest.mark.asyncio
async def test_window_resets_after_expiry(limiter, clock) -> None:
    verdicts = []
    for t in (0, 1, 2):
        clock.at_ms(t)
        verdicts.append(await limiter.admit("c"))

    assert [v.allowed for v in verdicts] == [True, True, True]
    assert [v.remaining for v in verdicts] == [2, 1, 0]

    clock.at_ms(3)
    assert (await limiter.admit("c")).allowed is False

    clock.at_ms(1050)
    reset = await limiter.admit("c")
    assert reset.allowed is True
    assert reset.remaining == 2


@pytest.mark.asyncio
async def test_no_reset_exactly_at_window_edge(limiter, clock) -> None:
    for _ in range(3):
        await limiter.admit("c")

    clock.at_ms(1000)
    assert (await limiter.admit("c")).allowed is False

    clock.at_ms(1001)
    assert (await limiter.admit("c")).allowed is True


@pytest.mark.asyncio
async def test_burst_never_exceeds_capacity(limiter) -> None:
    verdicts = [await limiter.admit("burst") for _ in range(8)]

    assert sum(v.allowed for v in verdicts) == 3
    assert all(v.remaining >= 0 for v in verdicts)


@pytest.mark.asyncio
async def test_greedy_boundary_burst_is_accepted(limiter, clock) -> None:
    """Anchoring the window at its first request lets bursts straddle the edge.

    Requests at t=0, 900, 950 use the first window; after t=1000 the budget
    refills wholesale, so t=1001 and t=1002 also pass although five requests
    then fall inside the trailing second [2, 1002].
    """
    admitted = []
    for t in (0, 900, 950, 1001, 1002):
        clock.at_ms(t)
        verdict = await limiter.admit("edge")
        if verdict.allowed:
            admitted.append(t)

    in_trailing_window = [t for t in admitted if 1002 - t < 1000]
    assert in_trailing_window == [900, 950, 1001, 1002]
    assert len(in_trailing_window) > 3


@pytest.mark.asyncio
async def test_window_start_recorded_once_per_cycle(limiter, clock, fake_redis) -> None:
    base = int(clock.at_ms(0)() * 1000)
    await limiter.admit("c")
    clock.at_ms(500)
    await limiter.admit("c")

    assert await fake_redis.get("c_timestamp__v3") == str(base)
    assert await fake_redis.get("c_remainingTokens__v3") == "1"


@pytest.mark.asyncio
async def test_denial_retry_after_points_past_window(limiter, clock) -> None:
    for _ in range(3):
        await limiter.admit("c")

    clock.at_ms(400)
    denied = await limiter.admit("c")

    assert denied.allowed is False
    assert denied.retry_after_seconds == 1
    assert denied.reset_at == int(clock.at_ms(0)()) + 1
