"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).
AppSettings composes the sub-configs so each concern can also be built on
its own (e.g. DatabaseSettings in a maintenance script).
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlparse

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str
    db_name: str = "url-redirector"
    collection_name: str = "urls"
    server_selection_timeout_ms: int = 5000


class RedisSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Optional; without it rate-limit counters stay in process memory
    redis_uri: Optional[str] = None


class RateLimitSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    rate_limit_enabled: bool = True
    rate_limit_window_seconds: int = Field(default=900, gt=0)
    rate_limit_max_requests: int = Field(default=100, gt=0)

    @property
    def limit_string(self) -> str:
        """Limit in the ``limits`` notation, e.g. ``100/900 seconds``."""
        return f"{self.rate_limit_max_requests}/{self.rate_limit_window_seconds} seconds"


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production

    # Sampling rates (0.0–1.0)
    sample_rate_redirect: float = 0.05
    sample_rate_stats: float = 0.20


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1
    sentry_profile_sample_rate: float = 0.05


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    env: str = "development"
    app_name: str = "URL Redirector API"
    app_version: str = "1.0.0"
    base_url: str = "http://localhost:3000"
    port: int = 3000

    cors_origins: list[str] = ["*"]

    # Swagger UI; disabling it also hides the OpenAPI schema
    swagger_enabled: bool = True
    docs_url: str = "/api-docs"

    short_code_length: int = Field(default=6, ge=1, le=12)

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    redis: Optional[RedisSettings] = None
    rate_limit: Optional[RateLimitSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        self.base_url = self.base_url.rstrip("/")

        # Populate sub-configs from the same env/dotenv source
        if self.db is None:
            self.db = DatabaseSettings()
        if self.redis is None:
            self.redis = RedisSettings()
        if self.rate_limit is None:
            self.rate_limit = RateLimitSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def is_development(self) -> bool:
        return self.env == "development"

    @property
    def base_host(self) -> str:
        """Hostname of ``base_url``; URLs pointing here are refused."""
        return (urlparse(self.base_url).hostname or "").lower()
