"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for the WeatherForecast API happen here. No
module should call os.getenv() or os.environ.get() directly -- import
get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. secret_key -> SECRET_KEY, rate_limit_permit -> RATE_LIMIT_PERMIT).

  @model_validator(mode="after"): Implements the DEBUG-conditional SECRET_KEY
      rule: dev mode generates a key with a warning, production mode refuses
      to start without one.

Security notes:
  [M6] SECRET_KEY shorter than 32 chars is rejected outright. HS256 token
       signing relies on key entropy -- a short key weakens every token.

  [M7] Outside DEBUG, a missing SECRET_KEY is a hard startup failure. Token
       issuance never sees an empty key, so there is no per-request error path
       for it.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or cache/.
"""

import logging
import secrets
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("weatherapi.config")

_DEFAULT_WEATHER_DATA = Path(__file__).parent / "data" / "weather-data.json"
_DEFAULT_AUTH_DB_URL = f"sqlite:///{Path(__file__).parent.parent / 'weatherapi_auth.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file. The model_validator enforces
    production-safety rules at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = ""

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    jwt_issuer: str = "WeatherForecastAPI"
    jwt_audience: str = "WeatherForecastAPI"
    token_expire_minutes: int = 1440

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    # 0 keeps only the mandatory non-empty rules.
    password_min_length: int = 0
    auth_db_url: str = _DEFAULT_AUTH_DB_URL

    # ------------------------------------------------------------------
    # Weather lookup, cache and rate guard
    # ------------------------------------------------------------------

    weather_data_path: Path = _DEFAULT_WEATHER_DATA
    weather_cache_ttl_minutes: int = 30
    rate_limit_permit: int = 10
    rate_limit_window_seconds: int = 60

    # Per-IP brute-force limit on register/login (slowapi limit string).
    auth_rate_limit: str = "10/minute"

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy [M7].

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Tokens will not survive restart -- acceptable for local dev.

        Production mode (DEBUG=false or not set): refuse to start if
            SECRET_KEY is missing.

        Both modes: reject keys shorter than 32 characters [M6].
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("Using auto-generated SECRET_KEY. Issued tokens will not survive a restart.")
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self

    @model_validator(mode="after")
    def validate_limits(self) -> "Settings":
        if self.rate_limit_permit < 1 or self.rate_limit_window_seconds < 1:
            raise ValueError("RATE_LIMIT_PERMIT and RATE_LIMIT_WINDOW_SECONDS must be positive.")
        if self.weather_cache_ttl_minutes < 0 or self.token_expire_minutes < 1:
            raise ValueError("Cache TTL must be >= 0 and token lifetime must be positive.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()


def now_iso() -> str:
    """Current UTC time as an ISO 8601 string (audit timestamps)."""
    return datetime.now(timezone.utc).isoformat()
