"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    log_level: str = "INFO"

    # Planner defaults
    default_start_time: str = "09:00"
    visit_duration_minutes: int = Field(default=60, gt=0)
    default_transit_minutes: int = Field(default=30, ge=0)
    day_end_time: str = "18:00"

    # Routing provider
    google_maps_api_key: SecretStr | None = None
    routes_base_url: str = "https://routes.googleapis.com/directions/v2:computeRoutes"

    # Venue data source
    venues_base_url: str = "http://localhost:3000"
    venue_fetch_timeout_s: float = 4.0

    # Timeouts (milliseconds)
    routing_soft_timeout_ms: int = 2000
    routing_hard_timeout_ms: int = 4000

    # Circuit breaker
    circuit_breaker_failures: int = 5
    circuit_breaker_window_sec: int = 60
    circuit_breaker_half_open_sec: int = 30

    # Cache TTL (seconds)
    routing_cache_ttl_seconds: int = 3600


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
