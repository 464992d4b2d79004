"""Report catalogue and query building for the analytics endpoints.

Each report is a fixed read-only query over ``hourly_events``,
``hourly_stats`` or ``poi``. Dated reports accept an optional range:

- start and end: ``date >= start AND date <= end``
- start only: ``date = start``
- neither: unfiltered

Dates are always bound parameters, never formatted into the SQL text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from analytics_api.adapters.db.base import AbstractQueryExecutor
from analytics_api.core.errors import ValidationAppError


@dataclass(frozen=True)
class ReportQuery:
    sql: str
    params: dict[str, Any] = field(default_factory=dict)


_REPORT_TEMPLATES: dict[str, str] = {
    "events_hourly": """
    SELECT date, hour, events
    FROM public.hourly_events
    {range}
    ORDER BY date, hour
    LIMIT 50;
    """,
    "events_daily": """
    SELECT date, SUM(events) AS events
    FROM public.hourly_events
    {range}
    GROUP BY date
    ORDER BY date
    LIMIT 20;
    """,
    "stats_hourly": """
    SELECT date, hour, impressions, clicks, revenue
    FROM public.hourly_stats
    {range}
    ORDER BY date, hour
    LIMIT 50;
    """,
    "stats_daily": """
    SELECT date,
        SUM(impressions) AS impressions,
        SUM(clicks) AS clicks,
        SUM(revenue) AS revenue
    FROM public.hourly_stats
    {range}
    GROUP BY date
    ORDER BY date
    LIMIT 20;
    """,
}

_POI_SQL = """
    SELECT *
    FROM public.poi;
"""

REPORTS = frozenset(_REPORT_TEMPLATES) | {"poi"}


def build_date_range(
    start_date: date | None,
    end_date: date | None,
) -> tuple[str, dict[str, Any]]:
    """Build the WHERE clause and bind parameters for a date range.

    An end date without a start date is ignored.
    """
    if start_date and end_date:
        if end_date < start_date:
            raise ValidationAppError(
                code="invalid_date_range",
                message="endDate must not be before startDate",
            )
        return (
            "WHERE date >= :start_date AND date <= :end_date",
            {"start_date": start_date, "end_date": end_date},
        )
    if start_date:
        return "WHERE date = :start_date", {"start_date": start_date}
    return "", {}


def build_report_query(
    report: str,
    start_date: date | None = None,
    end_date: date | None = None,
) -> ReportQuery:
    if report == "poi":
        return ReportQuery(sql=_POI_SQL)
    try:
        template = _REPORT_TEMPLATES[report]
    except KeyError:
        raise ValidationAppError(
            code="unknown_report",
            message=f"Unknown report: {report}",
            details={"report": report},
        ) from None
    clause, params = build_date_range(start_date, end_date)
    return ReportQuery(sql=template.format(range=clause), params=params)


class AnalyticsService:
    """Runs catalogue reports against the relational store."""

    def __init__(self, executor: AbstractQueryExecutor) -> None:
        self.executor = executor

    async def fetch_report(
        self,
        report: str,
        *,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[dict[str, Any]]:
        query = build_report_query(report, start_date, end_date)
        return await self.executor.fetch_all(query.sql, query.params)
