"""
Environment-driven configuration for the tracking backend.

Values come from process environment variables or a local .env file.
Call get_settings() instead of constructing Settings directly so every
caller shares one instance:

    from backend.settings import get_settings

    tables = get_settings().workout_sessions_table
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENVIRONMENTS = ("development", "staging", "production", "test")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Tracking backend configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- runtime ---
    environment: str = Field(
        default="development",
        description="One of development, staging, production or test",
    )
    log_level: str = Field(default="INFO", description="Root logger level name")

    # --- Supabase connection ---
    supabase_url: Optional[str] = Field(default=None, description="Project REST endpoint")
    supabase_service_role_key: Optional[str] = Field(
        default=None,
        description="Server-side key; bypasses row level security",
    )
    supabase_anon_key: Optional[str] = Field(
        default=None,
        description="Public key; used only when no service role key is set",
    )

    # --- tracking storage ---
    workout_sessions_table: str = Field(default="workout_sessions")
    planned_workouts_table: str = Field(default="planned_workouts")
    user_metrics_table: str = Field(default="user_metrics")
    workout_history_limit: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Sessions returned by workout history when no limit is passed",
    )

    @field_validator("environment")
    @classmethod
    def _known_environment(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in ENVIRONMENTS:
            raise ValueError(
                f"Invalid environment '{value}'; expected one of {', '.join(ENVIRONMENTS)}"
            )
        return normalized

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        normalized = value.upper()
        if normalized not in LOG_LEVELS:
            raise ValueError(
                f"Invalid log level '{value}'; expected one of {', '.join(LOG_LEVELS)}"
            )
        return normalized

    @property
    def supabase_key(self) -> Optional[str]:
        """Service role key when present, otherwise the anon key."""
        return self.supabase_service_role_key or self.supabase_anon_key

    @property
    def is_supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_test(self) -> bool:
        return self.environment == "test"


@lru_cache
def get_settings() -> Settings:
    """
    Process-wide Settings, read once.

    Tests that change the environment call get_settings.cache_clear().
    """
    return Settings()
