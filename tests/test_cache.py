"""Unit tests for cache/store.py and cache/weather.py.

Covers:
  - TTLCache expiry is exact: an entry is gone once the clock reaches expires_at
  - purge_expired() removes only expired entries
  - CachedWeatherService shares one slot across case and whitespace variants
  - Cached results are returned verbatim (same object)
  - NotFound and BadRequest results are never cached
"""

from unittest.mock import MagicMock

import pytest

from cache.store import TTLCache
from cache.weather import CachedWeatherService, cache_key
from core.messages import MessageKey
from core.models import WeatherForecast
from core.results import Result, StatusCode

_LONDON = WeatherForecast(city="London", temperature=12.5, condition="Cloudy")

# ---------------------------------------------------------------------------
# TTLCache
# ---------------------------------------------------------------------------


def test_default_ttl_is_thirty_minutes():
    assert TTLCache().ttl == 30 * 60


def test_get_missing_key(clock):
    assert TTLCache(clock=clock).get("nope") is None


def test_entry_lives_until_expiry(clock):
    cache = TTLCache(ttl=60, clock=clock)
    entry = cache.set("k", "v")
    assert entry.expires_at == clock.now + 60

    clock.advance(59)
    assert cache.get("k") == "v"

    clock.advance(1)
    assert cache.get("k") is None


def test_per_entry_ttl_overrides_default(clock):
    cache = TTLCache(ttl=60, clock=clock)
    cache.set("short", 1, ttl=5)
    clock.advance(5)
    assert cache.get("short") is None


def test_set_replaces_entry(clock):
    cache = TTLCache(ttl=60, clock=clock)
    cache.set("k", "old")
    clock.advance(50)
    cache.set("k", "new")
    clock.advance(50)
    assert cache.get("k") == "new"


def test_purge_expired(clock):
    cache = TTLCache(ttl=60, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2, ttl=600)
    clock.advance(61)
    assert cache.purge_expired() == 1
    assert len(cache) == 1
    assert cache.get("b") == 2


def test_close_empties_cache(clock):
    cache = TTLCache(clock=clock)
    cache.set("a", 1)
    cache.close()
    assert len(cache) == 0


# ---------------------------------------------------------------------------
# CachedWeatherService
# ---------------------------------------------------------------------------


@pytest.fixture
def inner():
    lookup = MagicMock()
    lookup.get_weather.return_value = Result.ok(_LONDON, MessageKey.WEATHER_RETRIEVED)
    return lookup


def test_cache_key_is_canonical():
    assert cache_key("  LonDon ") == cache_key("london") == "weather:london"


def test_case_variants_hit_inner_once(inner, clock):
    service = CachedWeatherService(inner, TTLCache(clock=clock))

    first = service.get_weather("London")
    second = service.get_weather("LONDON")
    third = service.get_weather(" london ")

    assert inner.get_weather.call_count == 1
    assert first is second is third


def test_not_found_is_not_cached(inner, clock):
    inner.get_weather.return_value = Result.fail(StatusCode.NOT_FOUND, MessageKey.WEATHER_NOT_FOUND)
    cache = TTLCache(clock=clock)
    service = CachedWeatherService(inner, cache)

    service.get_weather("Atlantis")
    result = service.get_weather("Atlantis")

    assert result.status is StatusCode.NOT_FOUND
    assert inner.get_weather.call_count == 2
    assert len(cache) == 0


def test_bad_request_is_not_cached(inner, clock):
    inner.get_weather.return_value = Result.fail(StatusCode.BAD_REQUEST, MessageKey.CITY_REQUIRED)
    cache = TTLCache(clock=clock)
    CachedWeatherService(inner, cache).get_weather("")
    assert len(cache) == 0


def test_entry_expires_after_ttl(inner, clock):
    service = CachedWeatherService(inner, TTLCache(ttl=30 * 60, clock=clock))

    service.get_weather("London")
    clock.advance(30 * 60 - 1)
    service.get_weather("London")
    assert inner.get_weather.call_count == 1

    clock.advance(1)
    service.get_weather("London")
    assert inner.get_weather.call_count == 2


def test_inner_errors_propagate(inner, clock):
    inner.get_weather.side_effect = OSError("disk gone")
    with pytest.raises(OSError):
        CachedWeatherService(inner, TTLCache(clock=clock)).get_weather("London")
