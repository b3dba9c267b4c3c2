"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="FIELDROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Field Route Optimization API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for plan artifacts.")

    stops_per_cluster: int = Field(
        default=5,
        ge=1,
        description="Target stops per work package when choosing the cluster count. Not load-tested.",
    )
    assignment_penalty: float = Field(
        default=0.5,
        ge=0.0,
        description="Miles added per cluster a worker already holds when picking the nearest worker.",
    )
    max_iterations: int = Field(default=50, ge=1, description="Iteration cap for centroid refinement.")
    convergence_threshold: float = Field(
        default=0.0001,
        ge=0.0,
        description="Centroid movement (degrees, per axis) below which refinement stops.",
    )
    earth_radius_miles: float = Field(default=3959.0, gt=0.0)
    random_seed: Optional[int] = Field(
        default=None,
        description="Seed for centroid initialization. Leave unset for a fresh random source per run.",
    )

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
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
    locations_table: str = "houses"
    worker_presence_table: str = "employee_locations"
    assignments_table: str = "assignments"
    profiles_table: str = "profiles"

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

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
