"""Builds the synchronization services and runs the synchronization workflows."""

from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from gitspot_sync.configuration.env import Settings
from gitspot_sync.configuration.models import SyncConfiguration
from gitspot_sync.configuration.reconcile import reconcile_sync_configuration
from gitspot_sync.github.abc import GitHubClientBase
from gitspot_sync.github.adapter import GitHubKitAdapter
from gitspot_sync.hubspot.client import HubSpotNotesClient
from gitspot_sync.storage.database import create_engine, create_session_factory, verify_schema
from gitspot_sync.storage.repository import SqlAlchemyMappingRepository, SqlAlchemyRepositoryStore, SqlAlchemyRunLogRepository
from gitspot_sync.synchronize.releases import ReleaseSyncRunner
from gitspot_sync.synchronize.repositories import sync_github_repositories
from gitspot_sync.synchronize.results import RepositorySyncResult, RunSummary
from gitspot_sync.synchronize.run_log import RunLogRecorder

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


@dataclass
class SyncServices:
    """Clients and repositories shared by every synchronization run of a process."""

    config: SyncConfiguration
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    github: GitHubClientBase
    hubspot: HubSpotNotesClient

    @property
    def mappings(self) -> SqlAlchemyMappingRepository:
        return SqlAlchemyMappingRepository(self.session_factory)

    @property
    def run_logs(self) -> SqlAlchemyRunLogRepository:
        return SqlAlchemyRunLogRepository(self.session_factory)

    @property
    def repositories(self) -> SqlAlchemyRepositoryStore:
        return SqlAlchemyRepositoryStore(self.session_factory)

    def release_runner(self) -> ReleaseSyncRunner:
        """Create a runner wired to these services."""
        return ReleaseSyncRunner(
            github=self.github,
            publisher=self.hubspot,
            mappings=self.mappings,
            fetch_limit=self.config.release_fetch_limit,
            publish_delay_seconds=self.config.publish_delay_seconds,
        )

    async def close(self) -> None:
        """Release HTTP sessions and database connections."""
        await self.hubspot.aclose()
        await self.engine.dispose()


async def build_services(settings: Settings) -> SyncServices:
    """Reconcile configuration, verify the database schema and construct the clients.

    Raises:
        GitHubAuthenticationConfigurationUndefinedError: GitHub authentication is not usable.
        RequiredConfigurationElementError: A required setting is missing.
        StorageSchemaError: The database is missing required tables.
    """
    config = await reconcile_sync_configuration(settings)
    engine = create_engine(config.database_url)
    try:
        await verify_schema(engine)
    except Exception:
        await engine.dispose()
        raise
    github = GitHubKitAdapter.create(config.github)
    hubspot = HubSpotNotesClient.create(config.hubspot)
    logger.info("Built synchronization services", github_api_url=config.github.api_url, hubspot_api_url=config.hubspot.api_url)
    return SyncServices(
        config=config,
        engine=engine,
        session_factory=create_session_factory(engine),
        github=github,
        hubspot=hubspot,
    )


async def run_release_sync_workflow(
    services: SyncServices,
    mapping_id: int | None = None,
    dry_run: bool = False,
    record: bool = True,
) -> tuple[RunSummary, int | None]:
    """Run the release synchronization and return its summary and run log ID.

    The run is recorded in the run log only when ``record`` is set and this
    is not a dry run.
    """
    recorder = RunLogRecorder(services.run_logs) if record and not dry_run else None
    summary = await services.release_runner().run(mapping_id=mapping_id, dry_run=dry_run, recorder=recorder)
    return summary, recorder.run_id if recorder else None


async def run_repository_sync_workflow(services: SyncServices, org: str | None = None) -> RepositorySyncResult:
    """Synchronize the repository catalog of ``org``, or of the configured organization."""
    return await sync_github_repositories(services.github, services.repositories, org=org or services.config.github_org)
