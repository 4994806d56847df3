"""Configuration via pydantic-settings, 12-factor app style."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """streamtopk configuration, loaded from env vars / .env file."""

    model_config = SettingsConfigDict(env_prefix="STREAMTOPK_", env_file=".env", extra="ignore")

    default_k: int = Field(default=100, ge=1, description="Counter capacity when --k is not given")
    default_format: str = Field(default="auto", description="Default input format (auto|lines|json)")
    default_field: str = Field(default="", description="JSON field to count for NDJSON input")
    top_n: int = Field(default=10, ge=0, description="Rows shown in reports (0 = all tracked)")
    chart_width: int = Field(default=40, ge=1, description="Maximum bar width in characters")
    watch_interval: float = Field(default=0.5, gt=0, description="Refresh interval for watch mode, seconds")
    log_level: str = Field(default="WARNING", description="Root log level for the CLI")


settings = Settings()
