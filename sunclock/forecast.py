"""Sunrise and sunset series for multi-day forecast displays."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional

from joblib import Parallel, cpu_count, delayed

from .astro import SolarError, SolarQuery, compute_sun_times

__all__ = ["ForecastDay", "compute_forecast", "format_clock"]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForecastDay:
    """One day of a forecast; ``sunrise``/``sunset`` are ``None`` unless ``ok``."""

    date: date
    status: str
    sunrise: Optional[datetime] = None
    sunset: Optional[datetime] = None


def _solve_day(query: SolarQuery) -> ForecastDay:
    try:
        result = compute_sun_times(query)
    except SolarError as exc:
        return ForecastDay(date=query.date, status=exc.status)
    return ForecastDay(
        date=query.date, status="ok", sunrise=result.sunrise, sunset=result.sunset
    )


def compute_forecast(
    latitude: float,
    longitude: float,
    start: date,
    days: int = 8,
    utc_offset_hours: float = 0.0,
    *,
    daylight_saving: bool = False,
    n_jobs: int = 1,
) -> List[ForecastDay]:
    """Compute sunrise and sunset for *days* consecutive dates from *start*.

    ``longitude`` and ``utc_offset_hours`` are west-positive. A failure on
    one date is reported through that day's ``status`` and leaves the other
    days untouched. ``n_jobs`` follows :class:`joblib.Parallel`; values of
    zero or below use every CPU.
    """

    if days < 1:
        raise ValueError(f"days must be at least 1: {days}")

    queries = [
        SolarQuery(
            latitude=latitude,
            longitude=longitude,
            date=start + timedelta(days=offset),
            utc_offset_hours=utc_offset_hours,
            daylight_saving=daylight_saving,
        )
        for offset in range(days)
    ]

    if n_jobs <= 0:
        n_jobs = cpu_count()
    n_jobs = max(1, min(n_jobs, len(queries)))

    if n_jobs == 1:
        forecast = [_solve_day(query) for query in queries]
    else:
        forecast = Parallel(n_jobs=n_jobs)(
            delayed(_solve_day)(query) for query in queries
        )

    LOGGER.info(
        json.dumps(
            {
                "event": "forecast",
                "start": start.isoformat(),
                "days": days,
                "n_jobs": n_jobs,
                "failed": sum(1 for day in forecast if day.status != "ok"),
            }
        )
    )
    return list(forecast)


def format_clock(
    value: Optional[datetime],
    time_format: str = "%H:%M",
    placeholder: str = "N/A",
) -> str:
    """Short clock string for *value*, or *placeholder* when it is missing."""

    if value is None:
        return placeholder
    return value.strftime(time_format)
