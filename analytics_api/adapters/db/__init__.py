"""Relational store adapters - executes the report queries."""

from analytics_api.adapters.db.base import AbstractQueryExecutor
from analytics_api.adapters.db.sqlalchemy_executor import (
    SQLAlchemyQueryExecutor,
    close_query_executor,
    get_query_executor,
)

__all__ = [
    "AbstractQueryExecutor",
    "SQLAlchemyQueryExecutor",
    "close_query_executor",
    "get_query_executor",
]
