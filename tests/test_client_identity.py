"""Tests for client identity resolution."""

from starlette.requests import Request

from analytics_api.core.client_identity import UNKNOWN_CLIENT, resolve_client_key
from analytics_api.core.config import RateLimitSettings


def _request(client: tuple[str, int] | None, headers: dict[str, str] | None = None) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/events/hourly",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


def test_uses_peer_address() -> None:
    assert resolve_client_key(_request(("10.1.2.3", 5123))) == "10.1.2.3"


def test_falls_back_to_sentinel_without_peer() -> None:
    assert resolve_client_key(_request(None)) == UNKNOWN_CLIENT
    assert UNKNOWN_CLIENT == "Unknown IP"


def test_ignores_forwarding_headers_unless_trusted() -> None:
    request = _request(("10.0.0.1", 80), {"X-Forwarded-For": "203.0.113.9"})
    cfg = RateLimitSettings(trust_forwarded_headers=False)

    assert resolve_client_key(request, cfg) == "10.0.0.1"


def test_trusted_forwarded_for_uses_left_most_entry() -> None:
    request = _request(
        ("10.0.0.1", 80),
        {"X-Forwarded-For": "unknown, 203.0.113.9, 10.0.0.1"},
    )
    cfg = RateLimitSettings(trust_forwarded_headers=True)

    assert resolve_client_key(request, cfg) == "203.0.113.9"


def test_trusted_headers_checked_in_configured_order() -> None:
    request = _request(("10.0.0.1", 80), {"X-Real-IP": "198.51.100.7"})
    cfg = RateLimitSettings(trust_forwarded_headers=True)

    assert resolve_client_key(request, cfg) == "198.51.100.7"


def test_trusted_headers_absent_falls_back_to_peer_then_sentinel() -> None:
    cfg = RateLimitSettings(trust_forwarded_headers=True)

    assert resolve_client_key(_request(("10.0.0.1", 80)), cfg) == "10.0.0.1"
    assert resolve_client_key(_request(None), cfg) == UNKNOWN_CLIENT
