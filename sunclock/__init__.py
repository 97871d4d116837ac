"""Sunrise and sunset clock times from a low-precision solar ephemeris."""

from .astro import (
    CircumpolarError,
    ConvergenceError,
    Polar,
    SolarError,
    SolarQuery,
    SolarResult,
    UnsupportedEraError,
    compute_sun_times,
    solve_sunrise_sunset,
    west_longitude,
    west_utc_offset,
)
from .forecast import ForecastDay, compute_forecast, format_clock
from .settings import Settings, SettingsError, load_settings

__all__ = [
    "CircumpolarError",
    "ConvergenceError",
    "ForecastDay",
    "Polar",
    "Settings",
    "SettingsError",
    "SolarError",
    "SolarQuery",
    "SolarResult",
    "UnsupportedEraError",
    "compute_forecast",
    "compute_sun_times",
    "format_clock",
    "load_settings",
    "solve_sunrise_sunset",
    "west_longitude",
    "west_utc_offset",
]
