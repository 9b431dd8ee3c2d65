"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="DENTALMAP_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Dental Map Territory API"
    api_prefix: str = "/api"
    hold_duration_hours: float = Field(
        default=48.0,
        gt=0.0,
        description="How long a territory hold stays active before it expires.",
    )
    territory_capacity: int = Field(
        default=8,
        ge=1,
        description="Display ceiling used to compute the available territory count.",
    )
    circle_segments: int = Field(
        default=64,
        ge=8,
        description="Number of vertices used when drawing a territory circle as a polygon.",
    )
    notification_webhook_url: Optional[str] = Field(
        default=None,
        description="Webhook that receives lock confirmations (e.g. a Slack incoming webhook).",
    )
    notification_timeout_seconds: float = Field(default=5.0, gt=0.0)
    google_maps_api_key: Optional[str] = Field(
        default=None,
        description="Browser key served to the map front end.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "https://www.establishedshot.com",
            "https://dental-map.vercel.app",
            "https://map.establishedshot.com",
            "http://localhost:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Market data configuration
    census_api_url: str = Field(
        default="https://api.census.gov/data/2021/acs/acs5",
        description="American Community Survey 5-year endpoint.",
    )
    census_api_key: Optional[str] = Field(
        default=None,
        description="Optional Census key; anonymous requests are rate limited.",
    )
    zipcode_api_url: str = Field(default="https://www.zipcodeapi.com/rest")
    zipcode_api_key: Optional[str] = Field(
        default=None,
        description="ZipCodeAPI key for radius lookups; metro estimates are used without it.",
    )
    market_data_timeout_seconds: float = Field(default=10.0, gt=0.0)
    market_data_max_retries: int = Field(default=2, ge=0)
    market_data_backoff_seconds: float = Field(default=0.5, ge=0.0)
    market_data_max_parallel_requests: int = Field(default=6, ge=1)

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

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

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


settings = Settings()
