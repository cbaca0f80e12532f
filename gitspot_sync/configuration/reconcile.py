"""Reconcile application configuration from settings into typed credentials."""

from pathlib import Path

import structlog

from gitspot_sync.configuration.env import Settings
from gitspot_sync.configuration.models import GitHubAuthenticationType, GitHubCredentials, HubSpotCredentials, SyncConfiguration
from gitspot_sync.exceptions import GitHubAuthenticationConfigurationUndefinedError, RequiredConfigurationElementError

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


async def validate_github_authentication_configuration(
    github_pat_token: str | None,
    github_app_id: int | None,
    github_app_private_key_path: Path | None,
    github_app_installation_id: int | None,
) -> GitHubAuthenticationType:
    """Validates the GitHub authentication configuration.

    Args:
        github_pat_token (str | None): The GitHub PAT token.
        github_app_id (int | None): The GitHub App ID.
        github_app_private_key_path (Path | None): The path to the GitHub App private key.
        github_app_installation_id (int | None): The GitHub App installation ID.

    Raises:
        GitHubAuthenticationConfigurationUndefinedError: If both or neither of PAT and App configurations are defined,
            or if the App configuration is incomplete.

    Returns:
        GitHubAuthenticationType: The type of GitHub authentication used.
    """
    app_settings = {
        "GitHub App ID": (github_app_id, "github_app_id", "GITHUB_APP_ID"),
        "GitHub App private key path": (github_app_private_key_path, "github_app_private_key_path", "GITHUB_APP_PRIVATE_KEY_PATH"),
        "GitHub App installation ID": (github_app_installation_id, "github_app_installation_id", "GITHUB_APP_INSTALLATION_ID"),
    }
    any_app_setting = any(value for value, _, _ in app_settings.values())

    if github_pat_token and any_app_setting:
        raise GitHubAuthenticationConfigurationUndefinedError("Both PAT and GitHub App configurations are defined. Please use one or the other.")

    if github_pat_token:
        return GitHubAuthenticationType.PAT

    if not any_app_setting:
        raise GitHubAuthenticationConfigurationUndefinedError(
            "No GitHub authentication configuration provided. Please provide either a PAT or a GitHub App configuration."
        )

    missing = [
        f"{name} (command line option {cli_name}, environment variable {env_name})"
        for name, (value, cli_name, env_name) in app_settings.items()
        if not value
    ]
    if missing:
        raise GitHubAuthenticationConfigurationUndefinedError("Incomplete GitHub App configuration - missing settings include " + ", ".join(missing))
    return GitHubAuthenticationType.APP


async def reconcile_sync_configuration(settings: Settings) -> SyncConfiguration:
    """Resolve settings into the configuration needed to run release synchronization.

    Raises:
        GitHubAuthenticationConfigurationUndefinedError: If GitHub authentication is not usable.
        RequiredConfigurationElementError: If the HubSpot access token is missing.
    """
    github_auth_type = await validate_github_authentication_configuration(
        github_pat_token=settings.GITHUB_PAT_TOKEN,
        github_app_id=settings.GITHUB_APP_ID,
        github_app_private_key_path=settings.GITHUB_APP_PRIVATE_KEY_PATH,
        github_app_installation_id=settings.GITHUB_APP_INSTALLATION_ID,
    )
    if not settings.HUBSPOT_ACCESS_TOKEN:
        raise RequiredConfigurationElementError(
            name="HubSpot access token",
            cli_name="hubspot_access_token",
            env_name="HUBSPOT_ACCESS_TOKEN",
        )

    logger.debug(
        "Reconciled synchronization configuration",
        github_auth_type=github_auth_type.value,
        github_api_url=settings.GITHUB_API_URL,
        hubspot_api_url=settings.HUBSPOT_API_URL,
        release_fetch_limit=settings.RELEASE_FETCH_LIMIT,
    )
    return SyncConfiguration(
        github=GitHubCredentials(
            auth_type=github_auth_type,
            api_url=settings.GITHUB_API_URL,
            pat_token=settings.GITHUB_PAT_TOKEN,
            app_id=settings.GITHUB_APP_ID,
            app_private_key_path=settings.GITHUB_APP_PRIVATE_KEY_PATH,
            app_installation_id=settings.GITHUB_APP_INSTALLATION_ID,
        ),
        hubspot=HubSpotCredentials(
            access_token=settings.HUBSPOT_ACCESS_TOKEN,
            api_url=settings.HUBSPOT_API_URL,
        ),
        database_url=settings.DATABASE_URL,
        release_fetch_limit=settings.RELEASE_FETCH_LIMIT,
        publish_delay_seconds=settings.PUBLISH_DELAY_SECONDS,
        github_org=settings.GITHUB_ORG,
        cron_secret=settings.CRON_SECRET,
    )
