# src/campus_mood/api/v1/endpoints/stats.py
"""Campus-wide mood statistics and store usage endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from campus_mood.api.v1.dependencies import ServicesDep
from campus_mood.core.clock import parse_day_key
from campus_mood.schemas.stats import DailyStatsResponse, StatsSummaryResponse, UsageResponse

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/daily/{date}", response_model=DailyStatsResponse)
async def get_daily_stats(date: str, services: ServicesDep) -> DailyStatsResponse:
    try:
        parse_day_key(date)
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Date must be formatted as YYYY-MM-DD",
        ) from err

    stats = await services.aggregator.get_daily_stats(date)
    if stats is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No stats for this day")
    return DailyStatsResponse.model_validate(stats)


@router.get("/recent", response_model=list[DailyStatsResponse])
async def get_recent_stats(
    services: ServicesDep,
    days: int = Query(7, ge=1, le=90, description="Number of days including today"),
) -> list[DailyStatsResponse]:
    """Return stats for recent days, newest first. Days with no posts are omitted."""
    recent = await services.aggregator.get_recent_stats(days)
    return [DailyStatsResponse.model_validate(stats) for stats in recent]


@router.get("/summary", response_model=StatsSummaryResponse)
async def get_summary(
    services: ServicesDep,
    days: int = Query(30, ge=1, le=90),
) -> StatsSummaryResponse:
    summary = await services.aggregator.get_summary(days)
    return StatsSummaryResponse.model_validate(summary)


@router.get("/usage", response_model=UsageResponse)
async def get_usage(services: ServicesDep) -> UsageResponse:
    """Return today's read/write counts and their quota levels."""
    meter = services.meter
    usage = await meter.get_current_usage()
    if usage is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No usage recorded today")
    report = meter.report(usage.date, usage.daily_reads, usage.daily_writes)
    return UsageResponse(
        date=report.date,
        daily_reads=report.reads,
        daily_writes=report.writes,
        read_limit=meter.read_limit,
        write_limit=meter.write_limit,
        read_level=report.read_level.value,
        write_level=report.write_level.value,
    )
