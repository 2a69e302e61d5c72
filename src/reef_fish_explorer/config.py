"""
Application settings.

Values come from environment variables prefixed with ``REEF_`` (or a local
``.env`` file), e.g. ``REEF_DATASET_ID=...`` or ``REEF_CACHE_DIR=/tmp/cache``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the pipeline and CLI."""

    model_config = SettingsConfigDict(
        env_prefix="REEF_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "reef-fish-explorer"
    app_env: str = "development"
    debug: bool = False

    # OBIS query
    dataset_id: str = Field(default="", description="OBIS dataset UUID to analyse")
    include_measurements: bool = True

    # Locations
    cache_dir: Path = Path("data/cache")
    output_dir: Path = Path("site")
    api_port: int = 8000

    # measurementType names used by the survey's measurement-or-fact records
    trophic_type: str = "trophic"
    consumer_type: str = "consumer"
    length_type: str = "length"


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
