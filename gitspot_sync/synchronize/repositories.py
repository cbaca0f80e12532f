"""Synchronizes the GitHub repository catalog that mappings point at."""

import time

import structlog

from gitspot_sync.github.abc import GitHubClientBase
from gitspot_sync.synchronize.results import RepositorySyncResult
from gitspot_sync.synchronize.types import RepositoryStore

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


async def sync_github_repositories(github: GitHubClientBase, store: RepositoryStore, org: str | None = None) -> RepositorySyncResult:
    """List repositories from GitHub and upsert each of them by GitHub ID.

    Repositories missing an ID or full name are reported as errors. An error
    storing one repository does not stop the others.
    """
    start_time = time.time()
    repositories = await github.list_repositories(org)
    result = RepositorySyncResult()
    for repository in repositories:
        if not repository.github_id or not repository.full_name:
            message = f"Repository missing id or full_name ({repository.full_name or repository.github_id or 'unknown'})"
            logger.warning("Skipping incomplete repository", full_name=repository.full_name, github_id=repository.github_id)
            result.errors.append(message)
            continue
        try:
            created = await store.upsert_repository(repository)
        except Exception as exc:
            logger.exception("Failed to store repository", full_name=repository.full_name)
            result.errors.append(f"Repository {repository.full_name}: {exc}")
            continue
        if created:
            result.created += 1
        else:
            result.updated += 1

    logger.info(
        "Synchronized repositories",
        org=org,
        total_repos=len(repositories),
        created=result.created,
        updated=result.updated,
        error_count=len(result.errors),
        duration=round(time.time() - start_time, 2),
    )
    return result
