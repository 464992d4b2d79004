"""OpenAPI customization utilities.

Adds tag descriptions and documents the throttling contract on every
rate-limited operation: the ``X-RateLimit-*`` response headers, the 429
denial body and the 503 returned when the counter store is down.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

from analytics_api.core.errors import DENIAL_MESSAGE

_UNTHROTTLED_PATHS = {"/", "/health"}

_RATE_LIMIT_HEADERS = {
    "X-RateLimit-Limit": {
        "description": "Requests allowed per window.",
        "schema": {"type": "integer"},
    },
    "X-RateLimit-Remaining": {
        "description": "Requests left for this client.",
        "schema": {"type": "integer"},
    },
    "X-RateLimit-Reset": {
        "description": "UNIX time (seconds) when budget is next restored, when known.",
        "schema": {"type": "integer"},
    },
}

_DENIED_RESPONSE = {
    "description": "Rate limit exceeded.",
    "content": {
        "application/json": {
            "example": {"message": DENIAL_MESSAGE},
        }
    },
}

_STORE_DOWN_RESPONSE = {
    "description": "Rate limit store unavailable.",
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation with throttling documentation."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {
                "name": "Analytics",
                "description": "Rate-limited event, stats and POI reports.",
            },
            {
                "name": "Health",
                "description": "Liveness checks (not rate limited).",
            },
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            if path in _UNTHROTTLED_PATHS:
                continue
            for method_obj in methods.values():
                if not isinstance(method_obj, dict):
                    continue
                responses = method_obj.setdefault("responses", {})
                ok = responses.get("200")
                if isinstance(ok, dict):
                    ok.setdefault("headers", {}).update(_RATE_LIMIT_HEADERS)
                responses.setdefault("429", _DENIED_RESPONSE)
                responses.setdefault("503", _STORE_DOWN_RESPONSE)

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
