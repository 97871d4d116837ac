from __future__ import annotations

from typing import Iterable

import pytest
from fastapi.testclient import TestClient


@pytest.fixture(scope="session")
def api_client() -> Iterable[TestClient]:
    from sunrise_api import app

    with TestClient(app) as client:
        yield client


def test_health_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert payload["forecast_days"] == 8
    assert payload["max_forecast_days"] == 31


def test_sun_san_francisco_daylight_time(api_client: TestClient) -> None:
    response = api_client.get(
        "/sun",
        params={
            "lat": 37.8,
            "lon": -122.4,
            "date": "2021-06-21",
            "offset_hours": -8,
            "dst": "true",
        },
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["date"] == "2021-06-21"
    assert "05:00" < payload["sunrise"] < "06:00"
    assert "20:00" < payload["sunset"] < "21:00"
    assert payload["sunrise_local"].startswith("2021-06-21T05:")
    assert payload["sunrise_local"].endswith("-07:00")
    assert payload["source"] == "low-precision-ephemeris"


def test_sun_polar_night_uses_placeholder(api_client: TestClient) -> None:
    response = api_client.get(
        "/sun", params={"lat": 70.0, "lon": 0.0, "date": "2021-12-21"}
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "polar_night"
    assert payload["sunrise"] == "N/A"
    assert payload["sunset"] == "N/A"
    assert payload["sunrise_local"] is None


def test_sun_rejects_pre_gregorian_date(api_client: TestClient) -> None:
    response = api_client.get(
        "/sun", params={"lat": 45.0, "lon": 0.0, "date": "1500-06-01"}
    )
    assert response.status_code == 400
    payload = response.json()
    assert payload["ok"] is False
    assert payload["code"] == "http_400"


def test_validation_error(api_client: TestClient) -> None:
    response = api_client.get(
        "/sun",
        params={
            "lat": 95,  # invalid latitude
            "lon": 0,
            "date": "2021-06-21",
        },
    )
    assert response.status_code == 422
    payload = response.json()
    assert payload["code"] == "validation_error"
    assert payload["ok"] is False


def test_forecast_default_length(api_client: TestClient) -> None:
    response = api_client.get(
        "/forecast", params={"lat": 51.5, "lon": -0.1, "date": "2021-09-01"}
    )
    assert response.status_code == 200
    payload = response.json()
    assert [day["date"] for day in payload["days"]][:2] == ["2021-09-01", "2021-09-02"]
    assert len(payload["days"]) == 8
    assert all(day["status"] == "ok" for day in payload["days"])


def test_forecast_mixes_ok_and_polar_days(api_client: TestClient) -> None:
    response = api_client.get(
        "/forecast",
        params={"lat": 70.0, "lon": 0.0, "date": "2021-11-15", "days": 10},
    )
    assert response.status_code == 200
    days = response.json()["days"]
    assert days[0]["status"] == "ok"
    assert days[-1]["status"] == "polar_night"
    assert days[-1]["sunrise"] == "N/A"


def test_forecast_rejects_too_many_days(api_client: TestClient) -> None:
    response = api_client.get(
        "/forecast", params={"lat": 45.0, "lon": 0.0, "days": 100}
    )
    assert response.status_code == 400
    assert response.json()["code"] == "http_400"


def test_sun_http_error_keeps_the_cause() -> None:
    from datetime import date

    from fastapi import HTTPException

    from models import SunQueryParams
    from sunclock.astro import UnsupportedEraError
    from sunrise_api import sun_endpoint

    params = SunQueryParams(lat=45.0, lon=0.0, date=date(1500, 6, 1))
    with pytest.raises(HTTPException) as excinfo:
        sun_endpoint(params)
    assert excinfo.value.status_code == 400
    assert isinstance(excinfo.value.__cause__, UnsupportedEraError)
