"""Derive the key rate limiting state is partitioned by.

Callers are not authenticated, so identity is the network origin. Forwarding
headers are only honoured when the service is configured to sit behind a
trusted proxy; otherwise any client could pick its own key.
"""

from __future__ import annotations

from fastapi import Request

from analytics_api.core.config import RateLimitSettings, settings

UNKNOWN_CLIENT = "Unknown IP"


def _from_forwarding_headers(request: Request, header_names: list[str]) -> str | None:
    for name in header_names:
        value = request.headers.get(name)
        if not value:
            continue
        # X-Forwarded-For: client, proxy1, proxy2
        for candidate in value.split(","):
            candidate = candidate.strip()
            if candidate and candidate.lower() != "unknown":
                return candidate
    return None


def resolve_client_key(
    request: Request,
    rate_limit: RateLimitSettings | None = None,
) -> str:
    """Return a non-empty identity for the caller of ``request``.

    Falls back to ``UNKNOWN_CLIENT`` when no address can be resolved, which
    means all such callers share one budget.
    """
    cfg = rate_limit or settings.rate_limit

    if cfg.trust_forwarded_headers:
        forwarded = _from_forwarding_headers(request, cfg.forwarded_header_list)
        if forwarded:
            return forwarded

    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT
