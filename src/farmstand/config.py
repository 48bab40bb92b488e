"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="FARMSTAND_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Farmstand Marketplace API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root logging level.")
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    # Redis snapshot cache
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL (e.g., redis://localhost:6379/0).",
    )
    static_cache_key: str = "products:static:home"
    static_cache_ttl_seconds: int = Field(default=60 * 60, ge=1)
    cache_read_timeout_seconds: float = Field(default=0.25, gt=0.0)

    # Zip code geocoding
    geocoder_base_url: str = Field(
        default="https://api.zippopotam.us/us",
        description="Base URL of the zip code lookup service.",
    )
    geocoder_timeout_seconds: float = Field(default=5.0, gt=0.0)

    # Ranking
    browser_radius_km: float = Field(default=241.4, gt=0.0, description="~150 miles for browser locations.")
    zipcode_radius_km: float = Field(default=321.87, gt=0.0, description="~200 miles for zip-derived locations.")
    search_radius_km: float = Field(default=320.0, gt=0.0)
    min_local_results: int = Field(default=12, ge=0)
    home_page_size: int = Field(default=20, ge=1)
    geo_batch_size: int = Field(default=50, ge=1)
    search_batch_size: int = Field(default=50, ge=1)
    nearby_limit: int = Field(default=3, ge=1)
    catalog_timeout_seconds: float = Field(default=5.0, gt=0.0)
    delivery_horizon_days: int = Field(default=56, ge=1)

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
