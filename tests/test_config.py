"""Unit tests for core/config.py -- Settings validation rules."""

import pytest
from pydantic import ValidationError

from core.config import Settings, get_settings


def test_debug_generates_secret_key():
    settings = Settings(debug=True, secret_key="")
    assert len(settings.secret_key) == 64


def test_production_without_secret_key_refuses_to_start():
    with pytest.raises(ValidationError, match="SECRET_KEY is required"):
        Settings(debug=False, secret_key="")


def test_short_secret_key_rejected():
    with pytest.raises(ValidationError, match="at least 32"):
        Settings(debug=False, secret_key="too-short")


def test_defaults():
    settings = Settings(debug=False, secret_key="k" * 32)
    assert settings.weather_cache_ttl_minutes == 30
    assert settings.rate_limit_permit == 10
    assert settings.rate_limit_window_seconds == 60
    assert settings.jwt_issuer == "WeatherForecastAPI"
    assert settings.weather_data_path.is_file()


def test_non_positive_rate_limit_rejected():
    with pytest.raises(ValidationError):
        Settings(debug=True, rate_limit_permit=0)


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
