"""Rate limiting adapters.

Three interchangeable strategies behind one ``admit`` interface, all keeping
their per-client state in the shared counter store:

- ``1``: delegated moving-window limiter from the ``limits`` library.
- ``2``: sliding window log (default).
- ``3``: greedy fixed window.
"""

from analytics_api.adapters.rate_limit.base import (
    AbstractRateLimiter,
    RateLimitConfig,
    RateLimitResult,
)
from analytics_api.adapters.rate_limit.factory import (
    build_rate_limiters,
    get_rate_limiters,
    reset_rate_limiters,
    select_rate_limiter,
)

__all__ = [
    "AbstractRateLimiter",
    "RateLimitConfig",
    "RateLimitResult",
    "build_rate_limiters",
    "get_rate_limiters",
    "reset_rate_limiters",
    "select_rate_limiter",
]
