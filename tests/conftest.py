"""Pytest configuration and fixtures shared across all test modules.

Environment defaults are set before any application import so the settings
object is built from them and no .env file is picked up.
"""

import os

os.environ["APP_ENV"] = "testing"
os.environ.setdefault("RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("RATE_LIMIT_CAPACITY", "15")
os.environ.setdefault("RATE_LIMIT_WINDOW_MS", "60000")
os.environ.setdefault("LOG_FORMAT", "plain")

from typing import Any, Mapping  # noqa: E402

import pytest  # noqa: E402
from fakeredis import FakeServer, aioredis  # noqa: E402

from analytics_api.adapters.db.base import AbstractQueryExecutor  # noqa: E402
from analytics_api.adapters.store.redis_store import CounterStore  # noqa: E402

T0 = 1_700_000_000.0


class FakeClock:
    """Settable time source, UNIX seconds."""

    def __init__(self, start: float = T0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def at_ms(self, offset_ms: float) -> "FakeClock":
        """Move to ``offset_ms`` milliseconds after the starting instant."""
        self.now = T0 + offset_ms / 1000
        return self


class RecordingExecutor(AbstractQueryExecutor):
    """Query executor double that records calls instead of hitting a database."""

    def __init__(self, rows: list[dict[str, Any]] | None = None) -> None:
        self.rows = rows or []
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def fetch_all(
        self,
        sql: str,
        params: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        self.calls.append((sql, dict(params or {})))
        return self.rows


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def redis_server() -> FakeServer:
    """Backing server; set ``connected = False`` to simulate an outage."""
    return FakeServer()


@pytest.fixture
def fake_redis(redis_server: FakeServer) -> aioredis.FakeRedis:
    return aioredis.FakeRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def store(fake_redis: aioredis.FakeRedis) -> CounterStore:
    return CounterStore(fake_redis)


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()
