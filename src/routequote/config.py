"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="RQ_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Route Quote Planner API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for price books and quote outputs.")
    hub_price_book_file: Path = Field(
        default=Path("data/hubs.json"),
        description="Local hub directory used when no remote directory or database is configured.",
    )
    hub_directory_url: Optional[str] = Field(
        default=None,
        description="Base URL of the hub directory service (e.g., http://localhost:4000/api).",
    )
    settings_service_url: Optional[str] = Field(
        default=None,
        description="Base URL of the quote settings service.",
    )
    http_timeout_seconds: float = Field(default=10.0, gt=0.0)
    http_max_retries: int = Field(default=3, ge=0)
    http_backoff_seconds: float = Field(default=0.5, ge=0.0)

    # White-glove labor defaults
    wg_hourly_rate: float = Field(default=75.0, ge=0.0)
    wg_overtime_threshold_hours: float = Field(default=8.0, ge=0.0)
    wg_overtime_multiplier: float = Field(default=1.5, ge=0.0)
    wg_per_diem_amount: float = Field(default=150.0, ge=0.0)
    wg_operator_count: int = Field(default=1, ge=1)
    airport_check_in_minutes: int = Field(default=90, ge=0)
    train_buffer_minutes: int = Field(default=20, ge=0)
    transfer_buffer_minutes: int = Field(default=30, ge=0)
    internal_rollout_cost_per_item: float = Field(default=50.0, ge=0.0)

    # Commercial defaults
    default_margin_percentage: float = Field(default=30.0, ge=0.0)
    default_currency: str = Field(default="EUR", min_length=3, max_length=3)
    insurance_rate: float = Field(default=0.003, ge=0.0, description="Fraction of declared value.")

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

    @field_validator("data_root", "hub_price_book_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("hub_directory_url", "settings_service_url", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text.rstrip("/") or None

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
