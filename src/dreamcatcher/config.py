"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-3.5-turbo"
    openai_temperature: float = 0.7
    openai_timeout_seconds: float = 60.0
    analysis_language: str = "Simplified Chinese (简体中文)"
    image_base_url: str = "https://image.pollinations.ai"
    image_timeout_seconds: float = 60.0
    storage_dir: Path = Path.home() / ".dreamcatcher" / "images"
    timezone: str = "UTC"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    supabase_url: str
    supabase_service_key: str
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
