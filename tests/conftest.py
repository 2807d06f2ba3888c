"""
tests/conftest.py -- Shared test fixtures for WeatherForecast API tests.

This module provides:
  - _make_test_store(): creates an isolated in-memory auth DB
  - _patch_lifespan(): wires test collaborators into app.state, bypassing real startup
  - api_client: TestClient plus a pre-registered user and its bearer token
  - FakeClock: settable time source for cache and rate guard tests

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs route handlers in a thread pool. Plain :memory: DBs
are per-connection and would present a blank schema to each worker thread.

DEBUG must be set before any auth/core import so get_settings() auto-generates
SECRET_KEY. AUTH_RATE_LIMIT is read when api/routes/v1/auth.py is imported, so
it is raised here, before the app import, to keep the per-IP login limit out
of the way of the integration tests.
"""

from __future__ import annotations

import asyncio
import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from typing import NamedTuple

# CRITICAL: Set env before any auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("AUTH_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import User
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenIssuer, hash_password
from cache.store import TTLCache
from cache.weather import CachedWeatherService
from core.config import get_settings
from core.rate_guard import FixedWindowRateGuard
from core.weather import WeatherRepository, WeatherService

TEST_USERNAME = "testuser"
TEST_PASSWORD = "testpass123"


class ApiClient(NamedTuple):
    client: TestClient
    token: str
    user: User


class FakeClock:
    """Callable clock whose time only moves when a test says so."""

    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_store() -> UserStore:
    """Create an isolated named shared-memory SQLite store.

    The random suffix keeps modules from seeing each other's users even when
    a previous module's store is still being torn down.
    """
    return UserStore(f"sqlite:///file:test_auth_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(user_store: UserStore, issuer: TokenIssuer):
    """Return an async context manager that replaces the real lifespan.

    Mirrors api.main.lifespan but with the test store and a rate guard high
    enough that only the tests that swap it in a small one ever see a 429.

    The purge_task is a long-sleeping coroutine (a real asyncio.Task is
    required; MagicMock would fail on .cancel()).
    """

    @asynccontextmanager
    async def test_lifespan(app):
        settings = get_settings()
        app.state.user_store = user_store
        app.state.token_issuer = issuer
        app.state.auth_service = AuthService(user_store, issuer)
        app.state.cache = TTLCache()
        app.state.weather_service = CachedWeatherService(
            WeatherService(WeatherRepository(settings.weather_data_path)),
            app.state.cache,
        )
        app.state.rate_guard = FixedWindowRateGuard(limit=10_000, window_seconds=60)
        app.state.purge_task = asyncio.create_task(asyncio.sleep(99999))
        yield
        app.state.purge_task.cancel()

    return test_lifespan


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client() -> Generator[ApiClient, None, None]:
    """Yield (client, token, user) for API integration tests.

    The user is created directly in the store before the client starts and
    its token comes from the same TokenIssuer the app verifies with.
    """
    user_store = _make_test_store()
    issuer = TokenIssuer.from_settings(get_settings())

    user = user_store.create(User(username=TEST_USERNAME, password_hash=hash_password(TEST_PASSWORD)))
    token = issuer.issue(user)

    app.router.lifespan_context = _patch_lifespan(user_store, issuer)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield ApiClient(client, token, user)

    user_store.close()
