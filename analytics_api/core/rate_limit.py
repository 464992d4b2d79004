"""Rate limiting dependency for FastAPI routes.

This is the decision gate between the throttling strategies and the report
endpoints. Routes depend on ``enforce_rate_limit`` only:

- allowed: the ``X-RateLimit-*`` headers are set and the route runs.
- denied: ``RateLimitExceededError`` is raised, the route body (and with it
  the query executor) is never reached and the client gets the fixed 429
  payload.

Strategy selection is by the ``api`` query parameter (``1``, ``2``, ``3``);
anything else uses the configured default.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Query, Request, Response

from analytics_api.adapters.rate_limit.base import RateLimitResult
from analytics_api.adapters.rate_limit.factory import (
    RateLimiters,
    get_rate_limiters,
    select_rate_limiter,
)
from analytics_api.core.client_identity import resolve_client_key
from analytics_api.core.config import settings
from analytics_api.core.errors import RateLimitExceededError
from analytics_api.core.logging import hash_client_key

logger = logging.getLogger(__name__)


def rate_limit_headers(result: RateLimitResult, *, include_reset: bool) -> dict[str, str]:
    headers = {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
    }
    if include_reset and result.reset_at is not None:
        headers["X-RateLimit-Reset"] = str(result.reset_at)
    return headers


async def enforce_rate_limit(
    request: Request,
    response: Response,
    limiters: Annotated[RateLimiters, Depends(get_rate_limiters)],
    api: Annotated[
        str | None,
        Query(description="Throttling strategy: 1 (delegated), 2 (sliding log), 3 (fixed window)"),
    ] = None,
) -> None:
    """FastAPI dependency consuming one token for the calling client.

    Raises:
        RateLimitExceededError: The client has no tokens left.
        StoreUnavailableError: The shared store failed; answered with 503.
    """

    if not settings.rate_limit.enabled:
        return

    limiter = select_rate_limiter(api, limiters)
    client_key = resolve_client_key(request)
    result = await limiter.admit(client_key)

    log_extra = {
        "strategy": limiter.version,
        "key_hash": hash_client_key(client_key),
        "limit": result.limit,
        "remaining": result.remaining,
        "window_ms": limiter.config.window_ms,
    }

    if result.allowed:
        logger.info("rate_limit.allowed", extra=log_extra)
        response.headers.update(
            rate_limit_headers(result, include_reset=settings.rate_limit.include_reset_header)
        )
        return

    logger.warning(
        "rate_limit.exceeded",
        extra={**log_extra, "retry_after_s": result.retry_after_seconds},
    )
    raise RateLimitExceededError(
        details={"strategy": limiter.version},
        retry_after_seconds=result.retry_after_seconds,
    )
