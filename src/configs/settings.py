"""Centralized settings management for the order-timeline ingest pipeline."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class IngestSettings(BaseSettings):
    """
    Process-wide defaults powered by pydantic-settings.

    Loads configuration from ``ORDER_INGEST_*`` environment variables and an
    optional ``.env`` file in the working directory.
    """

    # -------------------------------------------------------------------------
    # CLASSIFICATION
    # -------------------------------------------------------------------------
    RETURN_WINDOW_DAYS: int = Field(default=30, ge=0)

    # -------------------------------------------------------------------------
    # PARSING
    # -------------------------------------------------------------------------
    MAX_WORKERS: int = Field(default=1, ge=1)
    EMAIL_MASK: str = Field(default="****", min_length=1)

    # -------------------------------------------------------------------------
    # LOGGING
    # -------------------------------------------------------------------------
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = False

    model_config = SettingsConfigDict(
        env_prefix="ORDER_INGEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> IngestSettings:
    """
    Get cached settings.

    Returns
    -------
    IngestSettings
        The singleton settings instance.
    """
    return IngestSettings()
