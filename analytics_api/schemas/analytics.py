"""Pydantic schemas for analytics report rows."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field


class DailyEvents(BaseModel):
    """Events aggregated per day."""

    date: dt.date | dt.datetime
    events: int = Field(..., description="Number of events recorded.")


class HourlyEvents(DailyEvents):
    """Events recorded in one hour of one day."""

    hour: int = Field(..., ge=0, le=23, description="Hour of day (0-23).")


class DailyStats(BaseModel):
    """Ad delivery statistics aggregated per day."""

    date: dt.date | dt.datetime
    impressions: int
    clicks: int
    revenue: float = Field(..., description="Revenue in account currency.")


class HourlyStats(DailyStats):
    """Ad delivery statistics for one hour of one day."""

    hour: int = Field(..., ge=0, le=23, description="Hour of day (0-23).")
