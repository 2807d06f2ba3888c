"""
api/routes/v1/weather.py -- Weather lookup route.

GET /api/v1/weather?city=<name>

Dependency order matters. The rate guard is a route-level dependency, which
FastAPI resolves before the endpoint's own parameters, so a request over the
quota is rejected with 429 before the bearer token is checked and before the
cache is consulted:

  FixedWindowRateGuard -> get_current_user -> CachedWeatherService
"""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from api.models import ResultResponse, WeatherData
from api.responses import envelope
from auth.dependencies import get_current_user
from auth.models import User
from core.rate_guard import FixedWindowRateGuard
from core.results import ResultError

router = APIRouter()


def enforce_rate_guard(request: Request) -> None:
    """Spend one request from the global window or reject with 429."""
    guard: FixedWindowRateGuard = request.app.state.rate_guard
    result = guard.check()
    if not result.success:
        raise ResultError(result, headers={"Retry-After": str(guard.retry_after())})


@router.get(
    "/weather",
    response_model=ResultResponse[WeatherData],
    dependencies=[Depends(enforce_rate_guard)],
)
def get_weather(
    request: Request,
    city: str = Query(default="", max_length=100),
    current_user: User = Depends(get_current_user),
) -> JSONResponse:
    """Return the forecast for city (case-insensitive).

    400 CityRequired for a blank city, 404 WeatherDataNotFound for an unknown
    one. Successful lookups are served from cache for WEATHER_CACHE_TTL_MINUTES.
    """
    result = request.app.state.weather_service.get_weather(city)
    data = None
    if result.success and result.data is not None:
        data = WeatherData(
            city=result.data.city,
            temperature=result.data.temperature,
            condition=result.data.condition,
        )
    return envelope(result, request.app.state.localizer, data)
