"""
core/weather.py -- Weather lookup: JSON-backed repository and base service.

WeatherRepository loads the city dataset once at construction and answers
case-insensitive lookups from memory. WeatherService is the uncached
WeatherLookup implementation; cache/weather.py wraps it with the TTL cache.

Both implementations of WeatherLookup share one method signature so the
cache decorator can be composed around the base service by construction:

    service = CachedWeatherService(WeatherService(WeatherRepository(path)), TTLCache())
"""

import json
import logging
from pathlib import Path
from typing import Optional, Protocol

from core.messages import MessageKey
from core.models import WeatherForecast
from core.results import Result, StatusCode

logger = logging.getLogger("weatherapi.weather")


def normalize_city(city: str) -> str:
    """Canonical form of a city key: trimmed and casefolded."""
    return city.strip().casefold()


class WeatherLookup(Protocol):
    def get_weather(self, city: str) -> Result[WeatherForecast]: ...


class WeatherRepository:
    """Read-only city -> WeatherForecast map loaded from a JSON list.

    File format:
        [{"city": "London", "temperature": 12.5, "condition": "Cloudy"}, ...]

    A missing or empty file is logged and leaves the repository empty; every
    lookup then reports not-found instead of crashing the app at startup.
    """

    def __init__(self, path: Path) -> None:
        self._data: dict[str, WeatherForecast] = {}
        if not path.is_file():
            logger.error("Weather data file not found at path: %s", path)
            return
        items = json.loads(path.read_text(encoding="utf-8"))
        if not items:
            logger.error("No weather data found in the JSON file at path: %s", path)
            return
        for item in items:
            forecast = WeatherForecast(
                city=item["city"],
                temperature=float(item["temperature"]),
                condition=item["condition"],
            )
            self._data[normalize_city(forecast.city)] = forecast
        logger.info("Weather data loaded (%d cities)", len(self._data))

    def __len__(self) -> int:
        return len(self._data)

    def get_by_city(self, city: Optional[str]) -> Optional[WeatherForecast]:
        if city is None:
            return None
        return self._data.get(normalize_city(city))


class WeatherService:
    """Uncached weather lookup returning Result envelopes."""

    def __init__(self, repository: WeatherRepository) -> None:
        self._repository = repository

    def get_weather(self, city: str) -> Result[WeatherForecast]:
        if not city or not city.strip():
            return Result.fail(StatusCode.BAD_REQUEST, MessageKey.CITY_REQUIRED)
        forecast = self._repository.get_by_city(city)
        if forecast is None:
            return Result.fail(StatusCode.NOT_FOUND, MessageKey.WEATHER_NOT_FOUND)
        return Result.ok(forecast, MessageKey.WEATHER_RETRIEVED)
