"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (unset -> in-memory document store)
    database_url: str | None = None

    # External APIs
    google_api_key: str = ""
    places_base_url: str = "https://places.googleapis.com/v1"
    routes_base_url: str = "https://routes.googleapis.com/directions/v2:computeRoutes"
    http_timeout_seconds: float = 4.0

    # Detour candidate selection
    openai_api_key: SecretStr | None = None
    openai_model: str = "gpt-4o-mini"

    # Venue local time fallback when the place has no utcOffsetMinutes (JST)
    default_utc_offset_minutes: int = 540

    # Deadline buffers (minutes)
    prep_buffer_minutes: int = 10
    transit_fallback_buffer_minutes: int = 10

    # Integrity check thresholds
    near_previous_radius_m: float = 400.0
    warn_max_minutes: int = 15

    # Detour search
    detour_search_radius_m: int = 1000
    detour_pool_size: int = 20
    max_detour_candidates: int = 3

    # Debug knobs
    debug_force_unreachable_transit: bool = False
    debug_check_after_compile: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
