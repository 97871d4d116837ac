"""Runtime configuration read from ``SUNCLOCK_*`` environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

ENV_PREFIX = "SUNCLOCK_"


class SettingsError(ValueError):
    """Raised when an environment variable holds an unusable value."""


@dataclass(frozen=True)
class Settings:
    """Service settings; defaults match an eight-day forecast display."""

    forecast_days: int = 8
    max_forecast_days: int = 31
    n_jobs: int = 1
    placeholder: str = "N/A"
    time_format: str = "%H:%M"
    cors_origins: Tuple[str, ...] = ()
    log_level: str = "INFO"


def _read_int(env: Mapping[str, str], name: str, default: int, minimum: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise SettingsError(f"{ENV_PREFIX}{name} must be an integer: {raw!r}") from exc
    if value < minimum:
        raise SettingsError(f"{ENV_PREFIX}{name} must be at least {minimum}: {value}")
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build :class:`Settings` from *environ* (default :data:`os.environ`)."""

    env = os.environ if environ is None else environ

    max_days = _read_int(env, "MAX_FORECAST_DAYS", Settings.max_forecast_days, 1)
    forecast_days = _read_int(
        env, "FORECAST_DAYS", min(Settings.forecast_days, max_days), 1
    )
    if forecast_days > max_days:
        raise SettingsError(
            f"{ENV_PREFIX}FORECAST_DAYS ({forecast_days}) exceeds "
            f"{ENV_PREFIX}MAX_FORECAST_DAYS ({max_days})"
        )

    # joblib semantics: -1 means one worker per CPU
    n_jobs = _read_int(env, "N_JOBS", Settings.n_jobs, -1)
    if n_jobs == 0:
        raise SettingsError(f"{ENV_PREFIX}N_JOBS must not be 0")

    log_level = env.get(ENV_PREFIX + "LOG_LEVEL", Settings.log_level).strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise SettingsError(f"Unknown {ENV_PREFIX}LOG_LEVEL: {log_level!r}")

    origins = tuple(
        origin.strip()
        for origin in env.get(ENV_PREFIX + "CORS_ORIGINS", "").split(",")
        if origin.strip()
    )

    return Settings(
        forecast_days=forecast_days,
        max_forecast_days=max_days,
        n_jobs=n_jobs,
        placeholder=env.get(ENV_PREFIX + "PLACEHOLDER", Settings.placeholder),
        time_format=env.get(ENV_PREFIX + "TIME_FORMAT", Settings.time_format),
        cors_origins=origins,
        log_level=log_level,
    )
