"""SQLAlchemy async executor for the analytics database."""

import logging
from typing import Any, Mapping

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from analytics_api.adapters.db.base import AbstractQueryExecutor
from analytics_api.core.config import DatabaseSettings, settings
from analytics_api.core.errors import QueryExecutionError

logger = logging.getLogger(__name__)


class SQLAlchemyQueryExecutor(AbstractQueryExecutor):
    """Executes report queries on a pooled async engine."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine

    @classmethod
    def from_settings(cls, db_settings: DatabaseSettings) -> "SQLAlchemyQueryExecutor":
        engine = create_async_engine(
            db_settings.dsn,
            pool_size=db_settings.pool_size,
            pool_pre_ping=True,
        )
        return cls(engine)

    async def fetch_all(
        self,
        sql: str,
        params: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(text(sql), dict(params or {}))
                return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as exc:
            logger.error("query.failed", extra={"error_type": type(exc).__name__})
            raise QueryExecutionError(
                code="query_failed",
                message="Failed to load analytics data.",
            ) from exc

    async def dispose(self) -> None:
        await self.engine.dispose()


_executor: SQLAlchemyQueryExecutor | None = None


def get_query_executor() -> AbstractQueryExecutor:
    """Return the process-wide executor, creating the engine on first use."""
    global _executor
    if _executor is None:
        _executor = SQLAlchemyQueryExecutor.from_settings(settings.db)
    return _executor


async def close_query_executor() -> None:
    global _executor
    if _executor is not None:
        await _executor.dispose()
        _executor = None
