"""Contains the exceptions raised while synchronizing releases into HubSpot."""


class GitSpotSyncError(Exception):
    """Base class for all release synchronization errors."""

    pass


class ConfigurationError(GitSpotSyncError):
    """Base class for errors found while reconciling settings into a usable configuration."""

    pass


class GitHubAuthenticationConfigurationUndefinedError(ConfigurationError):
    """Raised when neither or both of the GitHub PAT and GitHub App settings are usable."""

    pass


class RequiredConfigurationElementError(ConfigurationError):
    """Raised when a setting the engine cannot run without is missing."""

    def __init__(self, name: str, cli_name: str, env_name: str) -> None:
        super().__init__(f"Missing required configuration element: {name} (command line option {cli_name}, environment variable {env_name})")
        self.name = name
        self.cli_name = cli_name
        self.env_name = env_name


class InvalidMappingError(GitSpotSyncError):
    """Raised when a mapping is missing an identifier required to synchronize it."""

    def __init__(self, reason: str) -> None:
        """Initializes the exception with the reason the mapping is unusable."""
        super().__init__(reason)
        self.reason = reason


class UpstreamError(GitSpotSyncError):
    """Raised when an external service answers with a non-success response."""

    def __init__(self, service: str, status_code: int, body: str, message: str | None = None) -> None:
        """Initializes the exception with the service name, HTTP status code, and response body."""
        super().__init__(message or f"{service} API Error: {status_code}{f' - {body}' if body else ''}")
        self.service = service
        self.status_code = status_code
        self.body = body


class ReleaseFetchError(UpstreamError):
    """Raised when GitHub rejects a request to list releases for a repository."""

    def __init__(self, status_code: int, body: str) -> None:
        """Initializes the exception with the GitHub status code and response body."""
        super().__init__("GitHub", status_code, body)


class NotFoundError(UpstreamError):
    """Raised when HubSpot reports that the target object does not exist."""

    pass


class RateLimitedError(UpstreamError):
    """Raised when HubSpot throttles a request.

    ``retry_after`` holds the number of seconds HubSpot asked us to wait, when
    the response carried that information.
    """

    def __init__(self, service: str, body: str, retry_after: float | None = None) -> None:
        """Initializes the exception with the response body and the advertised wait time."""
        super().__init__(service, 429, body, message=f"{service} API Rate Limit Error: {body or 'Too Many Requests'}")
        self.retry_after = retry_after


class StorageSchemaError(GitSpotSyncError):
    """Raised at startup when the database is missing tables the engine depends on."""

    def __init__(self, missing_tables: list[str]) -> None:
        """Initializes the exception with the names of the missing tables."""
        super().__init__(
            f"Database is missing required table(s): {', '.join(missing_tables)}. Run `gitspot-sync init-db` to create them."
        )
        self.missing_tables = missing_tables
