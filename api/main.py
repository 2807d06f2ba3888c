"""
api/main.py -- FastAPI application entry point for the WeatherForecast API.

Run with:      uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware    -- adds CORS headers for allowed browser origins
  2. SlowAPIMiddleware -- enforces per-IP limits on register/login (api.limiter)

Lifespan builds the long-lived collaborators once and shares them through
app.state:
  user_store        UserStore (SQLAlchemy, SQLite by default)
  token_issuer      TokenIssuer (HS256, SECRET_KEY from Settings)
  auth_service      AuthService
  cache             TTLCache backing the weather decorator
  weather_service   CachedWeatherService(WeatherService(WeatherRepository))
  rate_guard        FixedWindowRateGuard, one global window per process

Every response body, including errors raised outside the routes, is a
ResultResponse envelope.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import HealthResponse, ResultResponse
from api.responses import envelope
from api.routes.v1.auth import router as auth_router
from api.routes.v1.weather import router as weather_router
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenIssuer
from cache.store import TTLCache
from cache.weather import CachedWeatherService
from core.config import get_settings
from core.messages import Localizer, MessageKey
from core.rate_guard import FixedWindowRateGuard
from core.results import Result, ResultError, StatusCode
from core.weather import WeatherRepository, WeatherService

__version__ = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("weatherapi.api")

# ---------------------------------------------------------------------------
# Background purge task
# ---------------------------------------------------------------------------


async def _purge_loop(app: FastAPI) -> None:
    """Trim expired weather cache entries every 10 minutes.

    Expired entries are already invisible to readers; this only bounds memory.
    CancelledError from task.cancel() during shutdown propagates out of
    asyncio.sleep and unwinds the coroutine cleanly.
    """
    while True:
        await asyncio.sleep(10 * 60)
        removed = app.state.cache.purge_expired()
        if removed:
            logger.info("Purged %d expired cache entries", removed)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build shared collaborators on startup; release them on shutdown.

    get_settings() raises here when SECRET_KEY is missing outside DEBUG, so a
    misconfigured server never starts serving requests.
    """
    settings = get_settings()
    logger.info("WeatherForecast API starting up")

    app.state.user_store = UserStore(settings.auth_db_url)
    app.state.token_issuer = TokenIssuer.from_settings(settings)
    app.state.auth_service = AuthService(
        app.state.user_store,
        app.state.token_issuer,
        min_password_length=settings.password_min_length,
    )
    logger.info("Auth initialized")

    repository = WeatherRepository(settings.weather_data_path)
    app.state.cache = TTLCache(ttl=settings.weather_cache_ttl_minutes * 60)
    app.state.weather_service = CachedWeatherService(WeatherService(repository), app.state.cache)
    app.state.rate_guard = FixedWindowRateGuard(
        limit=settings.rate_limit_permit,
        window_seconds=settings.rate_limit_window_seconds,
    )
    logger.info(
        "Weather lookup initialized (cache_ttl=%dm, rate_limit=%d/%ds)",
        settings.weather_cache_ttl_minutes,
        settings.rate_limit_permit,
        settings.rate_limit_window_seconds,
    )
    app.state.purge_task = asyncio.create_task(_purge_loop(app))

    yield

    app.state.purge_task.cancel()
    app.state.cache.close()
    app.state.user_store.close()
    logger.info("WeatherForecast API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="WeatherForecast API",
    description="Authenticated, cached and rate-limited weather lookups.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter
app.state.localizer = Localizer()

# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(weather_router, prefix="/api/v1", tags=["Weather"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ResultResponse envelope so API clients can
# parse every response uniformly.
# ---------------------------------------------------------------------------


@app.exception_handler(ResultError)
async def result_error_handler(request: Request, exc: ResultError) -> JSONResponse:
    """Render a failed Result raised from a dependency (401 bearer, 429 rate guard)."""
    return envelope(exc.result, request.app.state.localizer, headers=exc.headers)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 when a per-IP auth limit is exceeded.

    Retry-After is the length of the limit's window in seconds.
    """
    retry_after = exc.limit.limit.get_expiry() if getattr(exc, "limit", None) is not None else 60
    result = Result.fail(StatusCode.TOO_MANY_REQUESTS, MessageKey.TOO_MANY_REQUESTS)
    return envelope(result, request.app.state.localizer, headers={"Retry-After": str(retry_after)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed body or query params are a BadRequest like any other invalid input."""
    logger.info("Request validation failed on %s: %s", request.url.path, exc.errors())
    result = Result.fail(StatusCode.BAD_REQUEST, MessageKey.VALIDATION_FAILED)
    return envelope(result, request.app.state.localizer)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing errors (404 unknown path, 405 wrong method) in envelope form."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ResultResponse(
            success=False,
            status_code=exc.status_code,
            message_key=f"http_{exc.status_code}",
            message=str(exc.detail),
        ).model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors (store or file I/O).

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    result = Result.fail(StatusCode.INTERNAL_ERROR, MessageKey.UNEXPECTED_ERROR)
    return envelope(result, request.app.state.localizer)


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py so it is always reachable. No rate limit and no
# auth -- health checks from load balancers must not be throttled.
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=__version__)
