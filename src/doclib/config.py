"""Application configuration from environment variables."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment (prefix DOCLIB_)."""

    model_config = SettingsConfigDict(
        env_prefix="DOCLIB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Storage
    data_dir: Path = Field(
        default=Path("./data"),
        description="Root directory for files, trash, indexes and graphs",
    )

    # Limits
    max_text_bytes: int = Field(default=1024 * 1024, description="Per-file ceiling for text")
    max_image_bytes: int = Field(default=3 * 1024 * 1024, description="Per-file ceiling for images")
    max_context_bytes: int = Field(
        default=8 * 1024 * 1024,
        description="Aggregate ceiling for one upload batch",
    )

    # Analysis
    summarization_enabled: bool = Field(default=True, description="Compute text summaries")
    summary_max_chars: int = Field(default=25_000, description="Summary input is truncated here")
    summary_min_chars: int = Field(
        default=100,
        description="Shorter text is its own summary",
    )
    summary_timeout_seconds: float = Field(default=30.0, description="Summary request timeout")
    vision_timeout_seconds: float = Field(default=45.0, description="Vision request timeout")

    # Generation API (OpenAI compatible)
    generation_api_url: str = Field(
        default="https://api.openai.com/v1",
        description="OpenAI-compatible chat completions API URL",
    )
    generation_api_key: str = Field(default="", description="Generation API key")
    generation_model: str = Field(default="gpt-4o-mini", description="Default summary model")
    vision_model: str = Field(default="", description="Vision model, defaults to generation_model")

    # GC
    trash_retention_days: float = Field(default=7, description="Default GC trash age threshold")

    # Application
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Environment name",
    )
    log_level: str = Field(default="INFO", description="Logging level")
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated allowed CORS origins",
    )
    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=8000, description="Bind port")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
