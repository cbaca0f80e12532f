# This file is intended to hold the setup for the authenticated githubkit client.

"""Sets up the authenticated githubkit client."""

from pathlib import Path
from typing import TypeAlias

import structlog
from githubkit import GitHub
from githubkit.auth import (
    AppAuthStrategy,
    AppInstallationAuthStrategy,
    TokenAuthStrategy,
)

from gitspot_sync.configuration.models import GitHubAuthenticationType, GitHubCredentials

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

GitHubClient: TypeAlias = GitHub[AppInstallationAuthStrategy] | GitHub[TokenAuthStrategy]


def get_github_app_client(
    github_app_id: int,
    github_app_private_key_path: Path,
    github_app_installation_id: int,
    github_api_url: str,
) -> GitHub[AppInstallationAuthStrategy]:
    """Returns a GitHub client authenticated as a GitHub App installation.

    The installation is addressed by ID rather than looked up from a single
    repository, since one client serves every mapped repository.
    """
    try:
        with open(github_app_private_key_path) as f:
            private_key = f.read()
    except OSError as e:
        raise ValueError(f"Failed to read GitHub App private key from {github_app_private_key_path}: {e}") from e
    # Disable HTTP caching to always get fresh data, and automatic retries so
    # that a failed request surfaces immediately as a failed mapping.
    app_client = GitHub(
        auth=AppAuthStrategy(app_id=github_app_id, private_key=private_key),
        base_url=github_api_url,
        http_cache=False,
        auto_retry=False,
    )
    return app_client.with_auth(app_client.auth.as_installation(github_app_installation_id))


def get_github_pat_client(github_pat_token: str, github_api_url: str) -> GitHub[TokenAuthStrategy]:
    """Returns an authenticated GitHub client using GitHub PAT credentials."""
    if not github_pat_token:
        raise RuntimeError("GitHub PAT authentication requires github_pat_token in config.")
    return GitHub(auth=TokenAuthStrategy(github_pat_token), base_url=github_api_url, http_cache=False, auto_retry=False)


def get_github_client(credentials: GitHubCredentials) -> GitHubClient:
    """Returns an authenticated GitHub client using either GitHub App or PAT credentials.

    Supports custom base URL for GitHub Enterprise Server (GHES).
    Raises RuntimeError if the credentials for the selected type are incomplete.
    """
    logger.info("Creating client for GitHub instance", github_api_url=credentials.api_url, auth_type=credentials.auth_type.value)
    if credentials.auth_type == GitHubAuthenticationType.APP:
        if not (credentials.app_id and credentials.app_private_key_path and credentials.app_installation_id):
            raise RuntimeError("GitHub App authentication requires app_id, private_key_path, and installation_id in config.")
        return get_github_app_client(
            credentials.app_id,
            credentials.app_private_key_path,
            credentials.app_installation_id,
            credentials.api_url,
        )
    if not credentials.pat_token:
        raise RuntimeError("GitHub PAT authentication requires github_pat_token in config.")
    return get_github_pat_client(credentials.pat_token, credentials.api_url)
