"""Pydantic models for API requests and responses."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class SunStatus(str, Enum):
    """Outcome of a single-day computation."""

    ok = "ok"
    polar_day = "polar_day"
    polar_night = "polar_night"
    unsupported_era = "unsupported_era"
    convergence_failure = "convergence_failure"


class SunQueryParams(BaseModel):
    """Validated query parameters for the ``/sun`` endpoint.

    ``lon`` and ``offset_hours`` use the ISO convention (east-positive).
    """

    model_config = ConfigDict(populate_by_name=True)

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(
        ..., ge=-180.0, le=180.0, description="Longitude in degrees, east-positive"
    )
    date_local: date = Field(..., alias="date", description="Local calendar date (YYYY-MM-DD)")
    offset_hours: float = Field(
        0.0,
        ge=-14.0,
        le=14.0,
        description="Standard-time offset from UTC in hours, east-positive (PST is -8)",
    )
    dst: bool = Field(False, description="Daylight saving time in effect (+1 hour)")


class ForecastQueryParams(BaseModel):
    """Validated query parameters for the ``/forecast`` endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(
        ..., ge=-180.0, le=180.0, description="Longitude in degrees, east-positive"
    )
    start: Optional[date] = Field(
        None, alias="date", description="First local date; defaults to today (UTC)"
    )
    days: Optional[int] = Field(None, ge=1, description="Number of consecutive days")
    offset_hours: float = Field(
        0.0,
        ge=-14.0,
        le=14.0,
        description="Standard-time offset from UTC in hours, east-positive (PST is -8)",
    )
    dst: bool = Field(False, description="Daylight saving time in effect (+1 hour)")


class SunDay(BaseModel):
    """Sunrise and sunset of one local date."""

    date: str = Field(..., description="Local date (ISO-8601)")
    status: SunStatus = Field(..., description="Computation status")
    sunrise: str = Field(..., description="Short local sunrise time or placeholder")
    sunset: str = Field(..., description="Short local sunset time or placeholder")
    sunrise_local: Optional[str] = Field(
        None, description="Sunrise as ISO-8601 local time with UTC offset"
    )
    sunset_local: Optional[str] = Field(
        None, description="Sunset as ISO-8601 local time with UTC offset"
    )


class SunResponse(SunDay):
    """Successful sunrise/sunset response payload."""

    ok: bool = True
    latitude: float = Field(..., description="Latitude in degrees")
    longitude: float = Field(..., description="Longitude in degrees, east-positive")
    offset_hours: float = Field(..., description="Standard-time UTC offset in hours")
    dst: bool = Field(..., description="Daylight saving time applied")
    source: Literal["low-precision-ephemeris"] = Field(
        "low-precision-ephemeris", description="Computation method identifier"
    )


class ForecastResponse(BaseModel):
    """Sunrise and sunset for consecutive days."""

    ok: bool = True
    latitude: float = Field(..., description="Latitude in degrees")
    longitude: float = Field(..., description="Longitude in degrees, east-positive")
    offset_hours: float = Field(..., description="Standard-time UTC offset in hours")
    dst: bool = Field(..., description="Daylight saving time applied")
    days: List[SunDay]


class HealthResponse(BaseModel):
    """Health-check response."""

    ok: bool = True
    forecast_days: int
    max_forecast_days: int


class ErrorResponse(BaseModel):
    """Error payload."""

    ok: bool = False
    code: str
    error: str
