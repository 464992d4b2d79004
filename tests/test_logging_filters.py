"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from analytics_api.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    hash_client_key,
    set_request_id,
)


@pytest.fixture
def capture():
    logger = logging.getLogger("test_redaction")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    def lines() -> list[dict]:
        return [json.loads(line) for line in stream.getvalue().splitlines()]

    yield logger, lines
    logger.handlers.clear()


def test_store_credentials_are_redacted(capture):
    logger, lines = capture

    logger.info(
        "store.error",
        extra={
            "redis_url": "redis://:hunter2@cache:6379/0",
            "password": "hunter2",
            "operation": "script",
        },
    )

    output = json.dumps(lines())
    assert "hunter2" not in output
    assert lines()[0]["operation"] == "script"
    assert lines()[0]["redis_url"] == "[REDACTED]"


def test_client_addresses_are_redacted_in_nested_extras(capture):
    logger, lines = capture

    logger.info(
        "rate_limit.allowed",
        extra={
            "headers": {"X-Forwarded-For": "203.0.113.9", "user-agent": "pytest"},
            "client_ip": "203.0.113.9",
        },
    )

    record = lines()[0]
    assert "203.0.113.9" not in json.dumps(record)
    assert record["headers"]["user-agent"] == "pytest"


def test_rate_limit_fields_pass_through(capture):
    logger, lines = capture

    logger.info(
        "rate_limit.exceeded",
        extra={"strategy": "2", "key_hash": hash_client_key("1.2.3.4"), "remaining": 0},
    )

    record = lines()[0]
    assert record["message"] == "rate_limit.exceeded"
    assert record["strategy"] == "2"
    assert record["remaining"] == 0
    assert "[REDACTED]" not in json.dumps(record)


def test_request_id_is_attached_from_context(capture):
    logger, lines = capture

    set_request_id("req-123")
    try:
        logger.info("within_request")
    finally:
        clear_request_id()
    logger.info("outside_request")

    first, second = lines()
    assert first["request_id"] == "req-123"
    assert "request_id" not in second


def test_client_key_hash_is_stable_and_short():
    assert hash_client_key("1.2.3.4") == hash_client_key("1.2.3.4")
    assert hash_client_key("1.2.3.4") != hash_client_key("1.2.3.5")
    assert len(hash_client_key("Unknown IP")) == 16
