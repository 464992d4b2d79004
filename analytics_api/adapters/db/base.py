from abc import ABC, abstractmethod
from typing import Any, Mapping


class AbstractQueryExecutor(ABC):
	"""Interface for read-only executors of analytical SQL."""

	@abstractmethod
	async def fetch_all(
		self,
		sql: str,
		params: Mapping[str, Any] | None = None,
	) -> list[dict[str, Any]]:
		"""Run a read-only query and return its rows.

		Args:
			sql: SQL text using ``:name`` bind parameters.
			params: Values for the bind parameters.

		Returns:
			list[dict[str, Any]]: One mapping per row, keyed by column name.

		Raises:
			QueryExecutionError: If the database rejects or fails the query.
		"""
		...
