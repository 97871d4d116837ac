"""Low-precision solar ephemeris for civil sunrise and sunset times.

The method follows Duffett-Smith's *Practical Astronomy With Your Calculator*
with the sidereal time algorithms of Sinnott (Sky and Telescope, June 1984):

1. calendar date to Julian date
2. days since the 1980.0 epoch to solar ecliptic longitude (Kepler's equation)
3. ecliptic longitude to right ascension and declination
4. local sidereal time of rising and setting for the date and the day after
5. interpolation between the two days
6. refraction and parallax correction
7. local sidereal time to local clock time

Sign conventions
----------------
``longitude`` and ``utc_offset_hours`` are **west-positive** throughout this
module: San Francisco is ``longitude=122.4`` and Pacific Standard Time is
``utc_offset_hours=8``. Use :func:`west_longitude` and :func:`west_utc_offset`
(or :meth:`SolarQuery.from_iso`) to convert the usual east-positive values.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Callable, Mapping, Optional, Tuple, Union

import numpy as np

__all__ = [
    "ConvergenceError",
    "CircumpolarError",
    "Polar",
    "SolarError",
    "SolarQuery",
    "SolarResult",
    "UnsupportedEraError",
    "adj24",
    "adj360",
    "atan_q_deg",
    "compute_sun_times",
    "equatorial",
    "gmst",
    "interpolate_event",
    "julian_date",
    "local_minutes",
    "refraction_correction",
    "rise_time",
    "set_time",
    "solar_longitude",
    "solve_sunrise_sunset",
    "west_longitude",
    "west_utc_offset",
]

EPOCH_JD = 2444238.5  # 1980 January 0.0
J2000_JD = 2451545.0
J1900_JD = 2415020.0
FIRST_SUPPORTED_YEAR = 1583

TROPICAL_YEAR_DAYS = 365.2422
ECLIPTIC_LONGITUDE_AT_EPOCH = 278.83354
PERIHELION_LONGITUDE = 282.596403
ECCENTRICITY = 0.016718
TRUE_ANOMALY_FACTOR = 1.0168601  # sqrt((1 + e) / (1 - e))
OBLIQUITY_DEG = 23.441884  # frozen at the 1980.0 epoch
KEPLER_TOLERANCE = 1e-7
KEPLER_MAX_ITERATIONS = 100

REFRACTION_PARALLAX_DEG = 0.835608
INTERPOLATION_SPAN_HOURS = 24.07
SIDEREAL_RATE = 1.002737909
SOLAR_RATE = 0.99727

Tracer = Callable[[str, Mapping[str, object]], None]


class SolarError(RuntimeError):
    """Raised when sunrise and sunset cannot be computed for a query."""

    status = "error"


class UnsupportedEraError(SolarError):
    """The Julian date formula only covers Gregorian years from 1583."""

    status = "unsupported_era"

    def __init__(self, year: int) -> None:
        super().__init__(
            f"Dates before {FIRST_SUPPORTED_YEAR} are not supported (year {year})"
        )
        self.year = year


class ConvergenceError(SolarError):
    """Kepler's equation did not converge within the iteration cap."""

    status = "convergence_failure"

    def __init__(self, iterations: int) -> None:
        super().__init__(
            f"Kepler's equation did not converge after {iterations} iterations"
        )
        self.iterations = iterations


class Polar(str, Enum):
    """Whole-day outcome when the sun neither rises nor sets."""

    day = "polar_day"
    night = "polar_night"


class CircumpolarError(SolarError):
    """The sun stays above (or below) the horizon for the whole date."""

    def __init__(self, polar: Polar) -> None:
        super().__init__(f"No sunrise or sunset on this date ({polar.value})")
        self.polar = polar
        self.status = polar.value


@dataclass(frozen=True)
class SolarQuery:
    """Location and date of a sunrise/sunset computation.

    ``longitude`` and ``utc_offset_hours`` are west-positive. With
    ``daylight_saving`` set the local clock runs one hour ahead of
    ``utc_offset_hours``.
    """

    latitude: float
    longitude: float
    date: date
    utc_offset_hours: float = 0.0
    daylight_saving: bool = False

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude must be within ±90 degrees: {self.latitude}")
        if not math.isfinite(self.longitude):
            raise ValueError(f"longitude must be finite: {self.longitude}")
        if not -24.0 <= self.utc_offset_hours <= 24.0:
            raise ValueError(
                f"utc_offset_hours must be within ±24 hours: {self.utc_offset_hours}"
            )

    @classmethod
    def from_iso(
        cls,
        latitude: float,
        east_longitude: float,
        on: date,
        east_utc_offset_hours: float = 0.0,
        daylight_saving: bool = False,
    ) -> "SolarQuery":
        """Build a query from east-positive (ISO 6709) longitude and offset."""

        return cls(
            latitude=latitude,
            longitude=west_longitude(east_longitude),
            date=on,
            utc_offset_hours=west_utc_offset(east_utc_offset_hours),
            daylight_saving=daylight_saving,
        )

    @property
    def clock_offset_hours(self) -> float:
        """West-positive offset of the local clock, daylight saving included."""

        return self.utc_offset_hours - (1.0 if self.daylight_saving else 0.0)


@dataclass(frozen=True)
class SolarResult:
    """Sunrise and sunset on the local clock, whole minutes."""

    sunrise: datetime
    sunset: datetime


def west_longitude(east_longitude: float) -> float:
    """Convert an east-positive longitude to the west-positive convention."""

    return -east_longitude


def west_utc_offset(east_offset_hours: float) -> float:
    """Convert a UTC offset such as ``-8`` (PST) to the west-positive ``8``."""

    return -east_offset_hours


def adj24(hours: float) -> float:
    """Normalise *hours* into ``[0, 24)``."""

    hours = hours % 24.0
    # a tiny negative input rounds up to exactly 24.0
    return 0.0 if hours >= 24.0 else hours


def adj360(degrees: float) -> float:
    """Normalise *degrees* into ``[0, 360)``."""

    degrees = degrees % 360.0
    return 0.0 if degrees >= 360.0 else degrees


def _sind(x: float) -> float:
    return math.sin(math.radians(x))


def _cosd(x: float) -> float:
    return math.cos(math.radians(x))


def _tand(x: float) -> float:
    return math.tan(math.radians(x))


def _asind(x: float) -> float:
    return math.degrees(math.asin(float(np.clip(x, -1.0, 1.0))))


def _acosd(x: float) -> float:
    return math.degrees(math.acos(float(np.clip(x, -1.0, 1.0))))


def atan_q_deg(y: float, x: float) -> float:
    """Quadrant-correct arc tangent of ``y / x`` in degrees, within ``[0, 360)``."""

    if y == 0:
        angle = 0.0
    elif x == 0:
        angle = 90.0 if y > 0 else -90.0
    else:
        angle = math.degrees(math.atan(y / x))

    if x < 0:
        return angle + 180.0
    if y < 0:
        return angle + 360.0
    return angle


def _julian_day_number(month: int, day: int, year: int) -> float:
    if month in (1, 2):
        year -= 1
        month += 12

    a = int(year / 100)
    b = 2 - a + a // 4
    b += int(year * 365.25)
    b += int(30.6001 * (month + 1.0))
    return day + b + 1720994.5


def julian_date(month: int, day: int, year: int) -> float:
    """Return the Julian date at 0h UT of a Gregorian calendar date.

    ``day`` may be ``0`` (the last day of the previous month).

    Raises
    ------
    UnsupportedEraError
        If the date falls before 1583 once January and February are counted
        as months 13 and 14 of the previous year.
    """

    shifted_year = year - 1 if month in (1, 2) else year
    if shifted_year < FIRST_SUPPORTED_YEAR:
        raise UnsupportedEraError(shifted_year)
    return _julian_day_number(month, day, year)


def solar_longitude(
    days_since_epoch: float, max_iterations: int = KEPLER_MAX_ITERATIONS
) -> float:
    """Ecliptic longitude of the sun in degrees, *days_since_epoch* after 1980.0."""

    n = adj360(360.0 * days_since_epoch / TROPICAL_YEAR_DAYS)
    mean_anomaly = math.radians(
        adj360(n + ECLIPTIC_LONGITUDE_AT_EPOCH - PERIHELION_LONGITUDE)
    )

    eccentric = mean_anomaly
    for _ in range(max_iterations):
        residual = eccentric - ECCENTRICITY * math.sin(eccentric) - mean_anomaly
        if abs(residual) <= KEPLER_TOLERANCE:
            break
        eccentric -= residual / (1.0 - ECCENTRICITY * math.cos(eccentric))
    else:
        raise ConvergenceError(max_iterations)

    true_anomaly = 2.0 * math.atan(TRUE_ANOMALY_FACTOR * math.tan(eccentric / 2.0))
    return adj360(math.degrees(true_anomaly) + PERIHELION_LONGITUDE)


def equatorial(ecliptic_longitude: float) -> Tuple[float, float]:
    """Return ``(right_ascension_hours, declination_degrees)`` of the sun."""

    right_ascension = (
        atan_q_deg(
            _sind(ecliptic_longitude) * _cosd(OBLIQUITY_DEG),
            _cosd(ecliptic_longitude),
        )
        / 15.0
    )
    declination = _asind(_sind(OBLIQUITY_DEG) * _sind(ecliptic_longitude))
    return right_ascension, declination


def _hour_angle(declination: float, latitude: float) -> Union[float, Polar]:
    if not -1.0 <= _sind(declination) / _cosd(latitude) <= 1.0:
        return Polar.day if latitude * declination > 0 else Polar.night
    return _acosd(-_tand(latitude) * _tand(declination)) / 15.0


def rise_time(
    right_ascension: float, declination: float, latitude: float
) -> Union[float, Polar]:
    """Local sidereal time of the geometric sunrise, or the polar outcome."""

    hour_angle = _hour_angle(declination, latitude)
    if isinstance(hour_angle, Polar):
        return hour_angle
    return adj24(right_ascension - hour_angle)


def set_time(
    right_ascension: float, declination: float, latitude: float
) -> Union[float, Polar]:
    """Local sidereal time of the geometric sunset, or the polar outcome."""

    hour_angle = _hour_angle(declination, latitude)
    if isinstance(hour_angle, Polar):
        return hour_angle
    return adj24(right_ascension + hour_angle)


def interpolate_event(
    today: Union[float, Polar],
    tomorrow: Union[float, Polar],
    midnight: float,
) -> Union[float, Polar]:
    """Blend the sidereal event times of two consecutive days.

    The weight of *tomorrow* is the fraction of the day between local
    midnight (sidereal time *midnight*) and the event.
    """

    for value in (today, tomorrow):
        if isinstance(value, Polar):
            return value

    ratio = adj24(today - midnight) / INTERPOLATION_SPAN_HOURS
    if abs(tomorrow - today) > 1.0:
        tomorrow += 24.0
    return adj24((1.0 - ratio) * today + ratio * tomorrow)


def refraction_correction(mean_declination: float, latitude: float) -> float:
    """Hours by which refraction and parallax advance sunrise and delay sunset."""

    tri = _acosd(_sind(latitude) / _cosd(mean_declination))
    # tri == 0 only on the polar circle itself; the ratio saturates at the clamp
    sin_tri = max(_sind(tri), 1e-12)
    y = _asind(_sind(REFRACTION_PARALLAX_DEG) / sin_tri)
    return 240.0 * y / (_cosd(mean_declination) * 3600.0)


def gmst(jd: float, fraction: float) -> float:
    """Greenwich mean sidereal time in hours.

    *jd* is the Julian date at noon preceding the day of interest and
    *fraction* the time of day as a fraction of a day counted from that noon,
    so ``gmst(jd0 - 0.5, 0.5)`` is the sidereal time at 0h UT of ``jd0``.
    """

    d = jd - J2000_JD
    t = d / 36525.0
    t1 = math.floor(t)
    j0 = t1 * 36525.0 + J2000_JD
    t2 = (jd - j0 + 0.5) / 36525.0
    s = 24110.54841 + 184.812866 * t1
    s += 8640184.812866 * t2
    s += 0.093104 * t * t
    s -= 0.0000062 * t * t * t
    s /= 86400.0
    s -= math.floor(s)
    return adj24(24.0 * (s + (fraction - 0.5) * SIDEREAL_RATE))


def local_minutes(
    sidereal_time: float,
    jd: float,
    utc_offset_hours: float,
    longitude: float,
    year: int,
) -> int:
    """Convert a local sidereal time on *jd* to minutes past local midnight.

    The sidereal time at 0h UT is referenced to January 0.0 of *year*.
    ``utc_offset_hours`` and ``longitude`` are west-positive.
    """

    gst = adj24(sidereal_time + longitude / 15.0)

    # January 0 of 1583 is 1582-12-31, outside the range julian_date accepts
    year_start = _julian_day_number(1, 0, year)
    elapsed = jd - year_start
    t = (year_start - J1900_JD) / 36525.0
    r = 6.6460656 + 2400.05126 * t + 2.58e-05 * t * t
    b = 24.0 - (r - 24.0 * (year - 1900))
    t0 = adj24(elapsed * 0.0657098 - b)

    gmt = adj24(gst - t0)
    local = adj24(gmt * SOLAR_RATE - utc_offset_hours)
    return int(local * 60.0 + 0.5)


def compute_sun_times(query: SolarQuery, trace: Optional[Tracer] = None) -> SolarResult:
    """Compute sunrise and sunset for *query*.

    Parameters
    ----------
    query:
        Location and date; longitude and offset are west-positive.
    trace:
        Optional callable receiving ``(stage, values)`` with the intermediate
        values of every stage.

    Raises
    ------
    UnsupportedEraError
        For dates before 1583.
    CircumpolarError
        When the sun does not rise or set on the date.
    ConvergenceError
        If Kepler's equation fails to converge.
    """

    def emit(stage: str, **values: object) -> None:
        if trace is not None:
            trace(stage, values)

    latitude = query.latitude
    longitude = query.longitude
    offset = query.clock_offset_hours
    year = query.date.year

    jd = julian_date(query.date.month, query.date.day, year)
    elapsed = jd - EPOCH_JD
    emit("julian_date", jd=jd, days_since_epoch=elapsed)

    lambda1 = solar_longitude(elapsed)
    lambda2 = solar_longitude(elapsed + 1.0)
    alpha1, delta1 = equatorial(lambda1)
    alpha2, delta2 = equatorial(lambda2)
    emit(
        "solar_position",
        longitude_today=lambda1,
        longitude_tomorrow=lambda2,
        ra_today=alpha1,
        dec_today=delta1,
        ra_tomorrow=alpha2,
        dec_tomorrow=delta2,
    )

    midnight = adj24(gmst(jd - 0.5, 0.5 + offset / 24.0) - longitude / 15.0)
    rise_today = rise_time(alpha1, delta1, latitude)
    set_today = set_time(alpha1, delta1, latitude)
    rise_tomorrow = rise_time(alpha2, delta2, latitude)
    set_tomorrow = set_time(alpha2, delta2, latitude)
    emit(
        "sidereal_events",
        midnight=midnight,
        rise_today=rise_today,
        set_today=set_today,
        rise_tomorrow=rise_tomorrow,
        set_tomorrow=set_tomorrow,
    )

    trise = interpolate_event(rise_today, rise_tomorrow, midnight)
    tset = interpolate_event(set_today, set_tomorrow, midnight)
    for outcome in (trise, tset):
        if isinstance(outcome, Polar):
            emit("circumpolar", polar=outcome.value)
            raise CircumpolarError(outcome)
    emit("interpolated", rise=trise, set=tset)

    dt = refraction_correction((delta1 + delta2) / 2.0, latitude)
    emit("correction", hours=dt)

    sunrise_minutes = local_minutes(adj24(trise - dt), jd, offset, longitude, year)
    sunset_minutes = local_minutes(adj24(tset + dt), jd, offset, longitude, year)
    emit("local_minutes", sunrise=sunrise_minutes, sunset=sunset_minutes)

    midnight_local = datetime.combine(query.date, time.min)
    return SolarResult(
        sunrise=midnight_local + timedelta(minutes=sunrise_minutes),
        sunset=midnight_local + timedelta(minutes=sunset_minutes),
    )


def solve_sunrise_sunset(
    latitude: float,
    longitude: float,
    on: date,
    utc_offset_hours: float = 0.0,
    *,
    daylight_saving: bool = False,
    trace: Optional[Tracer] = None,
) -> SolarResult:
    """Sunrise and sunset for a west-positive *longitude* and UTC offset."""

    query = SolarQuery(
        latitude=latitude,
        longitude=longitude,
        date=on,
        utc_offset_hours=utc_offset_hours,
        daylight_saving=daylight_saving,
    )
    return compute_sun_times(query, trace=trace)
