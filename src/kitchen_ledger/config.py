"""Application configuration."""

import logging
import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    api_token: str
    environment: str = _ENVIRONMENT
    log_level: str = "INFO"
    compensate_failed_commits: bool = True
    max_resume_rounds: int = 10

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_log_level(raw: str | None) -> int:
    """Parse a logging level name from env, defaulting to INFO."""
    if raw is None or not raw.strip():
        return logging.INFO
    name = raw.strip().upper()
    level = logging.getLevelNamesMapping().get(name)
    if level is None:
        raise ValueError(f"Unknown log level: {raw}")
    return level
