"""Base ABC for GitHub clients."""

from abc import ABC, abstractmethod

from gitspot_sync.synchronize.models import GitHubRepositoryRecord, ReleaseRecord


class GitHubClientBase(ABC):
    """Base ABC for GitHub clients."""

    # Release Operations
    @abstractmethod
    async def list_releases(self, owner: str, repo_name: str, limit: int = 10) -> list[ReleaseRecord]:
        """List the most recent releases for a repository, newest first."""
        pass

    # Repository Operations
    @abstractmethod
    async def list_repositories(self, org: str | None = None) -> list[GitHubRepositoryRecord]:
        """List repositories of an organization, or of the authenticated user when no organization is given."""
        pass
