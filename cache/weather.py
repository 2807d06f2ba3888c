"""
cache/weather.py -- Caching decorator around a WeatherLookup.

CachedWeatherService holds a reference to the inner lookup and exposes the
same get_weather(city) method, so routes cannot tell the two apart.

Policy:
  - City names are canonicalized (trimmed, casefolded): "London", "LONDON"
    and " london " share one cache slot.
  - A live entry is returned verbatim -- the exact Result object stored.
  - Only successful results with data are cached. NotFound and BadRequest
    pass through uncached, so a city added to the source later is picked up
    on the next request instead of being masked by a stale miss.
  - No lock is held across the inner call. Two concurrent misses for the
    same city may both hit the inner lookup; the last write wins.
"""

import logging

from cache.store import TTLCache
from core.models import WeatherForecast
from core.results import Result
from core.weather import WeatherLookup, normalize_city

logger = logging.getLogger("weatherapi.cache")

_KEY_PREFIX = "weather:"


def cache_key(city: str) -> str:
    return _KEY_PREFIX + normalize_city(city)


class CachedWeatherService:
    def __init__(self, inner: WeatherLookup, cache: TTLCache) -> None:
        self._inner = inner
        self._cache = cache

    def get_weather(self, city: str) -> Result[WeatherForecast]:
        key = cache_key(city or "")
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        result = self._inner.get_weather(city)
        if result.success and result.data is not None:
            self._cache.set(key, result)
            logger.debug("Cached %s for %ss", key, self._cache.ttl)
        return result
