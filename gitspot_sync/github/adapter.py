"""GitHub client adapter for the githubkit library."""

from datetime import datetime
from functools import wraps
from typing import Any, Awaitable, Callable, Self, TypeVar

import structlog
from githubkit import Response
from githubkit.exception import RequestFailed

from gitspot_sync.configuration.models import GitHubCredentials
from gitspot_sync.exceptions import ReleaseFetchError, UpstreamError
from gitspot_sync.synchronize.models import GitHubRepositoryRecord, ReleaseRecord
from gitspot_sync.utils.constants import DEFAULT_RELEASE_FETCH_LIMIT, MAX_RELEASES_PER_PAGE, REPOSITORIES_PER_PAGE
from gitspot_sync.utils.helpers import clamp

from .abc import GitHubClientBase
from .client import GitHubClient, get_github_client

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def _response_text(response: Any) -> str:
    try:
        return str(response.text or "")
    except Exception:
        return ""


def handle_github_request_failed(error_factory: Callable[[int, str], Exception]) -> Callable[[F], F]:
    """Decorator translating githubkit's RequestFailed into one of our upstream errors."""

    def decorator(func: F) -> F:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except RequestFailed as exc:
                status_code = exc.response.status_code
                body = _response_text(exc.response)
                logger.error(
                    "GitHub request failed",
                    function=func.__name__,
                    status_code=status_code,
                    url=str(getattr(exc.response, "url", None)),
                )
                raise error_factory(status_code, body) from exc

        return wrapper  # type: ignore

    return decorator


def _github_upstream_error(status_code: int, body: str) -> UpstreamError:
    return UpstreamError("GitHub", status_code, body)


def _optional(value: Any, expected_type: type) -> Any:
    """Return ``value`` when it is an instance of ``expected_type``, else None (githubkit marks absent fields as UNSET)."""
    return value if isinstance(value, expected_type) else None


class GitHubKitAdapter(GitHubClientBase):
    """GitHub client adapter for the githubkit library.

    Unlike a per-repository client, one adapter serves every mapped
    repository; the owner and repository name are passed on each call.
    """

    def __init__(self, client: GitHubClient) -> None:
        """Initialize the GitHub client adapter with an already-initialized client."""
        self.client = client

    @classmethod
    def create(cls, credentials: GitHubCredentials) -> Self:
        """Create a new GitHub client adapter from reconciled credentials."""
        return cls(get_github_client(credentials))

    # Release Operations
    @handle_github_request_failed(ReleaseFetchError)
    async def list_releases(self, owner: str, repo_name: str, limit: int = DEFAULT_RELEASE_FETCH_LIMIT) -> list[ReleaseRecord]:
        """List the most recent page of releases for a repository.

        Only the first page is requested; ``limit`` is clamped to the page
        size GitHub accepts.
        """
        per_page = clamp(limit, 1, MAX_RELEASES_PER_PAGE)
        logger.debug("Fetching releases", owner=owner, repo=repo_name, per_page=per_page)
        response: Response[list[Any]] = await self.client.rest.repos.async_list_releases(
            owner=owner,
            repo=repo_name,
            per_page=per_page,
            page=1,
        )
        releases = [self._to_release_record(release) for release in response.parsed_data]
        for release in releases:
            logger.debug(
                "Release found",
                tag_name=release.tag_name,
                name=release.name,
                draft=release.draft,
                prerelease=release.prerelease,
                published_at=release.published_at.isoformat() if release.published_at else "N/A",
            )
        logger.info("Fetched releases", owner=owner, repo=repo_name, total_releases=len(releases))
        return releases

    @staticmethod
    def _to_release_record(release: Any) -> ReleaseRecord:
        return ReleaseRecord(
            id=release.id,
            tag_name=_optional(release.tag_name, str),
            name=_optional(release.name, str),
            html_url=_optional(release.html_url, str),
            body=_optional(release.body, str),
            draft=bool(_optional(release.draft, bool)),
            prerelease=bool(_optional(release.prerelease, bool)),
            published_at=_optional(release.published_at, datetime),
        )

    # Repository Operations
    @handle_github_request_failed(_github_upstream_error)
    async def list_repositories(self, org: str | None = None) -> list[GitHubRepositoryRecord]:
        """List repositories for an organization, or for the authenticated user, handling pagination.

        Without an organization, repositories owned by the user and those of
        organizations the user belongs to are returned.
        """
        logger.info("Fetching repositories", org=org, per_page=REPOSITORIES_PER_PAGE)
        all_repositories: list[GitHubRepositoryRecord] = []
        page: int = 1
        while True:
            logger.debug(f"Fetching repositories page {page}")
            if org:
                response: Response[list[Any]] = await self.client.rest.repos.async_list_for_org(
                    org=org,
                    type="all",
                    sort="full_name",
                    direction="asc",
                    per_page=REPOSITORIES_PER_PAGE,
                    page=page,
                )
            else:
                response = await self.client.rest.repos.async_list_for_authenticated_user(
                    affiliation="owner,organization_member",
                    sort="full_name",
                    direction="asc",
                    per_page=REPOSITORIES_PER_PAGE,
                    page=page,
                )
            batch = response.parsed_data
            if not batch:
                break
            all_repositories.extend(self._to_repository_record(repository) for repository in batch)
            if len(batch) < REPOSITORIES_PER_PAGE:
                break
            page += 1

        logger.info("Fetched all repositories", org=org, total_repos=len(all_repositories))
        return all_repositories

    @staticmethod
    def _to_repository_record(repository: Any) -> GitHubRepositoryRecord:
        owner = getattr(repository, "owner", None)
        repository_id = _optional(getattr(repository, "id", None), int)
        return GitHubRepositoryRecord(
            github_id=str(repository_id) if repository_id is not None else None,
            full_name=_optional(getattr(repository, "full_name", None), str),
            name=_optional(getattr(repository, "name", None), str),
            owner_login=_optional(getattr(owner, "login", None), str),
            html_url=_optional(getattr(repository, "html_url", None), str),
            description=_optional(getattr(repository, "description", None), str),
            is_private=getattr(repository, "private", False) is True,
            is_fork=getattr(repository, "fork", False) is True,
            is_archived=getattr(repository, "archived", False) is True,
            default_branch=_optional(getattr(repository, "default_branch", None), str),
            pushed_at=_optional(getattr(repository, "pushed_at", None), datetime),
        )
