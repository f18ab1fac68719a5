"""Typed settings configuration - single source of truth."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Reasoning service
    gemini_api_key: SecretStr | None = None
    gemini_model: str = "gemini-2.5-flash"
    openai_api_key: SecretStr | None = None
    openai_model: str = "gpt-4o-mini"
    reasoning_temperature: float = 0.0
    reasoning_timeout_s: int = 60

    # Key-value store
    redis_url: str | None = None
    store_key_prefix: str = "lastmile_"

    # Search history
    history_limit: int = 5

    # Geolocation
    geolocation_provider: Literal["reported", "ip"] = "reported"
    geolocation_timeout_ms: int = 10_000
    geolocation_high_accuracy: bool = True
    ip_geolocation_url: str = "http://ip-api.com/json"

    # Live tracking
    live_refresh_interval_s: float = 120.0
    live_failure_threshold: int = 3


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
