"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTING_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Courier Routing API"
    api_prefix: str = "/api/routing"
    log_level: str = Field(default="INFO", description="Root logging level for the service.")
    default_algorithm: str = Field(
        default="nearest_neighbor",
        description="Algorithm used when a caller does not name one.",
    )
    default_average_speed_kmh: float = Field(default=30.0, gt=0.0)
    service_minutes_per_waypoint: float = Field(
        default=5.0,
        ge=0.0,
        description="Dwell time added for every waypoint when estimating travel time.",
    )
    comparison_timeout_seconds: float = Field(default=10.0, gt=0.0)
    travel_cache_ttl_seconds: float = Field(
        default=900.0,
        ge=0.0,
        description="Lifetime of cached travel estimates; 0 keeps entries until invalidated.",
    )
    travel_cache_max_entries: int = Field(default=10_000, ge=1)
    index_scan_warning_threshold: int = Field(
        default=10_000,
        ge=1,
        description="Entry count above which the linear-scan index logs a scaling warning.",
    )
    annealing_initial_temperature: float = Field(default=1_000.0, gt=0.0)
    annealing_cooling_rate: float = Field(default=0.995, gt=0.0, lt=1.0)
    annealing_final_temperature: float = Field(default=0.5, gt=0.0)
    annealing_iterations_per_temperature: int = Field(default=50, ge=1)
    annealing_seed: Optional[int] = Field(
        default=0,
        description="Seed for the annealing random source; unset for a fresh seed on every run.",
    )
    two_opt_max_passes: int = Field(default=50, ge=1)
    ortools_time_limit_seconds: int = Field(default=1, ge=1)
    nearest_couriers_default_radius_km: float = Field(default=10.0, gt=0.0)
    nearest_couriers_default_limit: int = Field(default=5, ge=1)
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
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

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> str:
        return str(value or "INFO").strip().upper()


settings = Settings()
