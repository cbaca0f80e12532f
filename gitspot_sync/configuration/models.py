"""Models for configuration resolved from CLI arguments and environment variables."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class GitHubAuthenticationType(str, Enum):
    """Enum for GitHub authentication types."""

    PAT = "pat"
    APP = "app"


@dataclass
class GitHubCredentials:
    """Credentials used to build the GitHub client."""

    auth_type: GitHubAuthenticationType
    api_url: str
    pat_token: str | None = None
    app_id: int | None = None
    app_private_key_path: Path | None = None
    app_installation_id: int | None = None


@dataclass
class HubSpotCredentials:
    """Credentials used to build the HubSpot client."""

    access_token: str
    api_url: str


@dataclass
class SyncConfiguration:
    """Fully reconciled configuration for a release synchronization process."""

    github: GitHubCredentials
    hubspot: HubSpotCredentials
    database_url: str
    release_fetch_limit: int
    publish_delay_seconds: float
    github_org: str | None = None
    cron_secret: str | None = None
