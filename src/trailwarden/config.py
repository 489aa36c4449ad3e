"""Lightweight configuration for the Trailwarden service."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings read from the environment and ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="TRAILWARDEN_"
    )

    data_dir: Path = Field(default=Path("sessions"), description="Where session snapshots live")
    rng_seed: str | None = Field(
        default=None,
        description="Seed for reproducible dice; unset rolls from system entropy",
    )
    log_limit: int = Field(default=200, description="Maximum number of kept log lines", gt=0)
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Origins allowed to call the HTTP API",
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    settings = Settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    return settings
