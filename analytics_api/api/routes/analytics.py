"""Throttled analytics report endpoints.

Every route runs the rate limit gate first; the report query is only
executed for admitted requests.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from analytics_api.adapters.db.base import AbstractQueryExecutor
from analytics_api.adapters.db.sqlalchemy_executor import get_query_executor
from analytics_api.core.rate_limit import enforce_rate_limit
from analytics_api.schemas.analytics import DailyEvents, DailyStats, HourlyEvents, HourlyStats
from analytics_api.services.analytics_service import AnalyticsService

router = APIRouter(tags=["Analytics"], dependencies=[Depends(enforce_rate_limit)])


@dataclass(frozen=True)
class DateRange:
    start_date: dt.date | None
    end_date: dt.date | None


def date_range(
    start_date: Annotated[
        dt.date | None,
        Query(alias="startDate", description="First day (YYYY-MM-DD); alone it selects a single day"),
    ] = None,
    end_date: Annotated[
        dt.date | None,
        Query(alias="endDate", description="Last day (YYYY-MM-DD), inclusive"),
    ] = None,
) -> DateRange:
    return DateRange(start_date=start_date, end_date=end_date)


def get_analytics_service(
    executor: Annotated[AbstractQueryExecutor, Depends(get_query_executor)],
) -> AnalyticsService:
    return AnalyticsService(executor)


ServiceDep = Annotated[AnalyticsService, Depends(get_analytics_service)]
RangeDep = Annotated[DateRange, Depends(date_range)]


@router.get("/events/hourly", response_model=list[HourlyEvents])
async def events_hourly(service: ServiceDep, dates: RangeDep) -> list[dict[str, Any]]:
    """Hourly event counts, at most 50 rows."""
    return await service.fetch_report(
        "events_hourly", start_date=dates.start_date, end_date=dates.end_date
    )


@router.get("/events/daily", response_model=list[DailyEvents])
async def events_daily(service: ServiceDep, dates: RangeDep) -> list[dict[str, Any]]:
    """Event counts summed per day, at most 20 rows."""
    return await service.fetch_report(
        "events_daily", start_date=dates.start_date, end_date=dates.end_date
    )


@router.get("/stats/hourly", response_model=list[HourlyStats])
async def stats_hourly(service: ServiceDep, dates: RangeDep) -> list[dict[str, Any]]:
    """Hourly impressions, clicks and revenue, at most 50 rows."""
    return await service.fetch_report(
        "stats_hourly", start_date=dates.start_date, end_date=dates.end_date
    )


@router.get("/stats/daily", response_model=list[DailyStats])
async def stats_daily(service: ServiceDep, dates: RangeDep) -> list[dict[str, Any]]:
    return await service.fetch_report(
        "stats_daily", start_date=dates.start_date, end_date=dates.end_date
    )


@router.get("/poi", response_model=list[dict[str, Any]])
async def points_of_interest(service: ServiceDep) -> list[dict[str, Any]]:
    """All points of interest."""
    return await service.fetch_report("poi")
