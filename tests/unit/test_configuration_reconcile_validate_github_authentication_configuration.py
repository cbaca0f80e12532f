"""Unit tests for validate_github_authentication_configuration function."""

from pathlib import Path

import pytest

from gitspot_sync.configuration.models import GitHubAuthenticationType
from gitspot_sync.configuration.reconcile import validate_github_authentication_configuration
from gitspot_sync.exceptions import GitHubAuthenticationConfigurationUndefinedError

KEY_PATH = Path("/keys/app.pem")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("pat", "app_id", "key_path", "installation_id", "expected"),
    [
        ("ghp-token", None, None, None, GitHubAuthenticationType.PAT),
        (None, 12, KEY_PATH, 34, GitHubAuthenticationType.APP),
    ],
)
async def test_valid_configurations(pat, app_id, key_path, installation_id, expected) -> None:
    """Exactly one complete authentication method is accepted."""
    auth_type = await validate_github_authentication_configuration(
        github_pat_token=pat,
        github_app_id=app_id,
        github_app_private_key_path=key_path,
        github_app_installation_id=installation_id,
    )
    assert auth_type == expected


@pytest.mark.asyncio
async def test_pat_and_app_together_is_rejected() -> None:
    with pytest.raises(GitHubAuthenticationConfigurationUndefinedError, match="Both PAT and GitHub App configurations are defined"):
        await validate_github_authentication_configuration(
            github_pat_token="ghp-token",
            github_app_id=12,
            github_app_private_key_path=None,
            github_app_installation_id=None,
        )


@pytest.mark.asyncio
async def test_no_configuration_is_rejected() -> None:
    with pytest.raises(GitHubAuthenticationConfigurationUndefinedError, match="No GitHub authentication configuration provided"):
        await validate_github_authentication_configuration(None, None, None, None)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("app_id", "key_path", "installation_id", "missing"),
    [
        (None, KEY_PATH, 34, ["GitHub App ID"]),
        (12, None, 34, ["GitHub App private key path"]),
        (12, KEY_PATH, None, ["GitHub App installation ID"]),
        (None, None, 34, ["GitHub App ID", "GitHub App private key path"]),
    ],
)
async def test_incomplete_app_configuration_lists_missing_settings(app_id, key_path, installation_id, missing) -> None:
    """Every missing GitHub App setting is named in the error."""
    with pytest.raises(GitHubAuthenticationConfigurationUndefinedError) as exc_info:
        await validate_github_authentication_configuration(None, app_id, key_path, installation_id)

    message = str(exc_info.value)
    assert message.startswith("Incomplete GitHub App configuration")
    for name in missing:
        assert name in message


@pytest.mark.asyncio
async def test_error_names_cli_option_and_environment_variable() -> None:
    with pytest.raises(GitHubAuthenticationConfigurationUndefinedError) as exc_info:
        await validate_github_authentication_configuration(None, 12, None, None)

    assert "command line option github_app_private_key_path" in str(exc_info.value)
    assert "environment variable GITHUB_APP_PRIVATE_KEY_PATH" in str(exc_info.value)
