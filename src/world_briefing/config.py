"""Configuration helpers for the world briefing service."""

import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="BRIEFING_"
    )

    cache_ttl_seconds: float = Field(
        120.0, description="How long a region's merged article list stays fresh."
    )
    refresh_interval_seconds: float = Field(
        60.0, description="Period of the background refresh for the selected region."
    )
    fetch_timeout_seconds: float = Field(
        10.0, description="Per-feed HTTP timeout; a slow feed contributes nothing."
    )
    max_items_per_feed: int = Field(10, description="Items kept from each feed.")
    user_agent: str = Field("WorldNews/1.0", description="User-Agent sent to feeds.")
    stream_batch_size: int = Field(3, description="Tokens per streamed chunk.")
    stream_interval_seconds: float = Field(
        0.03, description="Delay between streamed chunks."
    )
    log_level: str = Field("INFO", description="Root logging level.")
    cors_allow_all: bool = Field(True, description="Allow any origin (local dev).")
    cors_allow_origins: str = Field(
        "", description="Comma-separated origins used when cors_allow_all is false."
    )
    host: str = Field("0.0.0.0", description="Bind address for `serve`.")
    port: int = Field(3000, description="Bind port for `serve`.")


def get_settings() -> Settings:
    """Return a settings instance built from the environment."""
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
