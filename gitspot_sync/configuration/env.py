"""Pydantic Settings model for application configuration."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment variable settings for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Generic application-wide settings
    DEBUG: bool = False
    DATABASE_URL: str = "sqlite+aiosqlite:///gitspot.db"

    # Shared secret expected from the scheduler on the sync endpoint
    CRON_SECRET: str | None = None

    # GitHub API settings
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_ORG: str | None = None

    # GitHub PAT settings
    GITHUB_PAT_TOKEN: str | None = None

    # GitHub App settings
    GITHUB_APP_ID: int | None = None
    GITHUB_APP_PRIVATE_KEY_PATH: Path | None = None
    GITHUB_APP_INSTALLATION_ID: int | None = None

    # HubSpot settings
    HUBSPOT_API_URL: str = "https://api.hubapi.com"
    HUBSPOT_ACCESS_TOKEN: str | None = None

    # Release sync behavior
    RELEASE_FETCH_LIMIT: int = Field(default=10, ge=1, le=100)
    PUBLISH_DELAY_SECONDS: float = Field(default=0.2, ge=0)
