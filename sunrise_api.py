"""FastAPI application exposing sunrise and sunset computations."""

from __future__ import annotations

import json
import logging
import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta, timezone
from typing import Mapping, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from models import (
    ErrorResponse,
    ForecastQueryParams,
    ForecastResponse,
    HealthResponse,
    SunDay,
    SunQueryParams,
    SunResponse,
)
from sunclock.astro import (
    CircumpolarError,
    ConvergenceError,
    SolarQuery,
    UnsupportedEraError,
    compute_sun_times,
    west_longitude,
    west_utc_offset,
)
from sunclock.forecast import ForecastDay, compute_forecast, format_clock
from sunclock.settings import load_settings

SETTINGS = load_settings()

logging.basicConfig(level=SETTINGS.log_level, format="%(message)s")
LOGGER = logging.getLogger("sunrise-api")

APP_DESCRIPTION = (
    "Sunrise and sunset clock times from a low-precision solar ephemeris"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    LOGGER.info(
        json.dumps(
            {
                "event": "startup",
                "forecast_days": SETTINGS.forecast_days,
                "max_forecast_days": SETTINGS.max_forecast_days,
                "n_jobs": SETTINGS.n_jobs,
            }
        )
    )
    yield


app = FastAPI(
    title="Sunclock API",
    description=APP_DESCRIPTION,
    version="1.0.0",
    lifespan=lifespan,
)

if SETTINGS.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(SETTINGS.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _trace(stage: str, values: Mapping[str, object]) -> None:
    if LOGGER.isEnabledFor(logging.DEBUG):
        LOGGER.debug(json.dumps({"event": "trace", "stage": stage, **values}))


def _clock_offset(offset_hours: float, dst: bool) -> timezone:
    return timezone(timedelta(hours=offset_hours + (1.0 if dst else 0.0)))


def _format_local(dt: Optional[datetime], tz: timezone) -> Optional[str]:
    if dt is None:
        return None
    return dt.replace(tzinfo=tz).isoformat()


def _sun_day(day: ForecastDay, tz: timezone) -> SunDay:
    return SunDay(
        date=day.date.isoformat(),
        status=day.status,
        sunrise=format_clock(day.sunrise, SETTINGS.time_format, SETTINGS.placeholder),
        sunset=format_clock(day.sunset, SETTINGS.time_format, SETTINGS.placeholder),
        sunrise_local=_format_local(day.sunrise, tz),
        sunset_local=_format_local(day.sunset, tz),
    )


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    payload = ErrorResponse(code=code, error=message)
    LOGGER.error(json.dumps({"event": "error", "code": code, "message": message}))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = ", ".join(error["msg"] for error in exc.errors())
    return _error_response(422, "validation_error", messages)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("error") or detail.get("message") or str(detail)
    elif isinstance(detail, list):
        message = ", ".join(str(item) for item in detail)
    else:
        message = str(detail)
    return _error_response(exc.status_code, f"http_{exc.status_code}", message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", exc_info=exc)
    return _error_response(500, "internal_error", "Unhandled server error")


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(
        ok=True,
        forecast_days=SETTINGS.forecast_days,
        max_forecast_days=SETTINGS.max_forecast_days,
    )


@app.get(
    "/sun",
    response_model=SunResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def sun_endpoint(params: SunQueryParams = Depends()) -> SunResponse:
    start_time = time.perf_counter()
    try:
        query = SolarQuery.from_iso(
            params.lat,
            params.lon,
            params.date_local,
            params.offset_hours,
            daylight_saving=params.dst,
        )
        result = compute_sun_times(query, trace=_trace)
    except CircumpolarError as exc:
        day = ForecastDay(date=params.date_local, status=exc.status)
    except UnsupportedEraError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ConvergenceError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    else:
        day = ForecastDay(
            date=params.date_local,
            status="ok",
            sunrise=result.sunrise,
            sunset=result.sunset,
        )

    duration_ms = (time.perf_counter() - start_time) * 1000.0

    summary = _sun_day(day, _clock_offset(params.offset_hours, params.dst))
    response = SunResponse(
        **summary.model_dump(),
        latitude=params.lat,
        longitude=params.lon,
        offset_hours=params.offset_hours,
        dst=params.dst,
    )

    LOGGER.info(
        json.dumps(
            {
                "event": "sun",
                "lat": params.lat,
                "lon": params.lon,
                "date": params.date_local.isoformat(),
                "status": day.status,
                "duration_ms": round(duration_ms, 3),
            }
        )
    )
    return response


@app.get(
    "/forecast",
    response_model=ForecastResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def forecast_endpoint(params: ForecastQueryParams = Depends()) -> ForecastResponse:
    days = params.days or SETTINGS.forecast_days
    if days > SETTINGS.max_forecast_days:
        raise HTTPException(
            status_code=400,
            detail=f"days must not exceed {SETTINGS.max_forecast_days}",
        )
    start = params.start or datetime.now(UTC).date()

    forecast = compute_forecast(
        params.lat,
        west_longitude(params.lon),
        start,
        days,
        west_utc_offset(params.offset_hours),
        daylight_saving=params.dst,
        n_jobs=SETTINGS.n_jobs,
    )
    tz = _clock_offset(params.offset_hours, params.dst)
    return ForecastResponse(
        latitude=params.lat,
        longitude=params.lon,
        offset_hours=params.offset_hours,
        dst=params.dst,
        days=[_sun_day(day, tz) for day in forecast],
    )
