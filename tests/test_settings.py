from __future__ import annotations

import pytest

from sunclock.settings import Settings, SettingsError, load_settings


def test_defaults_from_empty_environment() -> None:
    assert load_settings({}) == Settings()


def test_reads_prefixed_variables() -> None:
    settings = load_settings(
        {
            "SUNCLOCK_FORECAST_DAYS": "5",
            "SUNCLOCK_MAX_FORECAST_DAYS": "10",
            "SUNCLOCK_N_JOBS": "-1",
            "SUNCLOCK_PLACEHOLDER": "--:--",
            "SUNCLOCK_TIME_FORMAT": "%I:%M %p",
            "SUNCLOCK_CORS_ORIGINS": "https://a.example, https://b.example,",
            "SUNCLOCK_LOG_LEVEL": "debug",
        }
    )
    assert settings.forecast_days == 5
    assert settings.max_forecast_days == 10
    assert settings.n_jobs == -1
    assert settings.placeholder == "--:--"
    assert settings.time_format == "%I:%M %p"
    assert settings.cors_origins == ("https://a.example", "https://b.example")
    assert settings.log_level == "DEBUG"


def test_default_forecast_length_respects_lower_maximum() -> None:
    settings = load_settings({"SUNCLOCK_MAX_FORECAST_DAYS": "3"})
    assert settings.forecast_days == 3


def test_reads_os_environ_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUNCLOCK_FORECAST_DAYS", "2")
    assert load_settings().forecast_days == 2


@pytest.mark.parametrize(
    "env",
    [
        {"SUNCLOCK_FORECAST_DAYS": "eight"},
        {"SUNCLOCK_FORECAST_DAYS": "0"},
        {"SUNCLOCK_FORECAST_DAYS": "40"},
        {"SUNCLOCK_N_JOBS": "0"},
        {"SUNCLOCK_LOG_LEVEL": "LOUD"},
    ],
)
def test_rejects_unusable_values(env) -> None:
    with pytest.raises(SettingsError):
        load_settings(env)
