"""SQLAlchemy implementations of the synchronization engine's repositories.

Each repository takes an ``async_sessionmaker`` and opens one short-lived
session per operation. ORM rows are converted to the engine's pydantic
models at this boundary, normalizing timestamps to UTC since some backends
(SQLite) drop timezone information.
"""

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from gitspot_sync.storage.models import (
    GitHubRepositoryModel,
    GitSpotCompanyMappingModel,
    GitSpotReleaseCronLogMappingModel,
    GitSpotReleaseCronLogModel,
)
from gitspot_sync.synchronize.models import GitHubRepositoryRecord, Mapping, RepositoryIdentity, Watermark
from gitspot_sync.synchronize.results import MappingResult, MappingStatus, RunSummary
from gitspot_sync.utils.helpers import ensure_utc, utc_now

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def _model_to_mapping(model: GitSpotCompanyMappingModel) -> Mapping:
    """Convert a mapping row and its related repository and company to a Mapping."""
    repository = model.repository
    return Mapping(
        id=model.id,
        company_id=model.company.company_id if model.company else None,
        repository=RepositoryIdentity(
            owner=repository.owner_login,
            name=repository.name,
            full_name=repository.full_name,
            html_url=repository.html_url,
            github_id=repository.github_id,
        ),
        watermark=Watermark(
            last_release_id=model.last_release_id,
            last_release_tag_name=model.last_release_tag_name,
            last_release_published_at=ensure_utc(model.last_release_published_at),
        ),
    )


class SqlAlchemyMappingRepository:
    """Reads mappings and writes their watermarks."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def list_mappings(self, mapping_id: int | None = None) -> list[Mapping]:
        """Return mappings ordered newest first, optionally restricted to ``mapping_id``."""
        stmt = (
            select(GitSpotCompanyMappingModel)
            .options(selectinload(GitSpotCompanyMappingModel.repository), selectinload(GitSpotCompanyMappingModel.company))
            .order_by(GitSpotCompanyMappingModel.created_at.desc(), GitSpotCompanyMappingModel.id.desc())
        )
        if mapping_id is not None:
            stmt = stmt.where(GitSpotCompanyMappingModel.id == mapping_id)
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return [_model_to_mapping(model) for model in result.scalars().all()]

    async def save_watermark(self, mapping_id: int, watermark: Watermark) -> None:
        """Overwrite the watermark columns of the mapping with ``mapping_id``."""
        stmt = (
            update(GitSpotCompanyMappingModel)
            .where(GitSpotCompanyMappingModel.id == mapping_id)
            .values(
                last_release_id=watermark.last_release_id,
                last_release_tag_name=watermark.last_release_tag_name,
                last_release_published_at=watermark.last_release_published_at,
                updated_at=utc_now(),
            )
        )
        async with self.session_factory() as session:
            await session.execute(stmt)
            await session.commit()
        logger.debug("Saved watermark", mapping_id=mapping_id, last_release_id=watermark.last_release_id)


class SqlAlchemyRunLogRepository:
    """Writes run log rows and per-mapping outcome rows."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def create_run(self) -> int:
        async with self.session_factory() as session:
            model = GitSpotReleaseCronLogModel(status="running", errors=[], started_at=utc_now())
            session.add(model)
            await session.commit()
            return model.id

    async def set_mappings_found(self, run_id: int, count: int) -> None:
        async with self.session_factory() as session:
            await session.execute(update(GitSpotReleaseCronLogModel).where(GitSpotReleaseCronLogModel.id == run_id).values(mappings_found=count))
            await session.commit()

    async def add_mapping_outcome(self, run_id: int, result: MappingResult) -> bool:
        """Insert the outcome row; a second outcome for the same run and mapping is ignored."""
        async with self.session_factory() as session:
            session.add(
                GitSpotReleaseCronLogMappingModel(
                    cron_log_id=run_id,
                    mapping_id=result.mapping_id,
                    status=result.status.value,
                    notes_created=result.notes_created,
                    error_message=result.error_message,
                )
            )
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.debug("Ignoring duplicate mapping outcome", run_id=run_id, mapping_id=result.mapping_id)
                return False
        return True

    async def finalize_run(self, run_id: int, summary: RunSummary) -> None:
        """Mark the run finished; it is failed when any mapping failed and completed otherwise."""
        mappings_failed = summary.count(MappingStatus.FAILED)
        stmt = (
            update(GitSpotReleaseCronLogModel)
            .where(GitSpotReleaseCronLogModel.id == run_id)
            .values(
                status="failed" if mappings_failed > 0 else "completed",
                completed_at=utc_now(),
                mappings_executed=summary.count(MappingStatus.SUCCESS),
                mappings_failed=mappings_failed,
                mappings_skipped=summary.skipped,
                notes_created=summary.notes_created,
                errors=list(summary.errors),
                error_message=summary.errors[0] if summary.errors else None,
            )
        )
        async with self.session_factory() as session:
            await session.execute(stmt)
            await session.commit()

    async def fail_run(self, run_id: int, error_message: str, errors: list[str] | None = None) -> None:
        stmt = (
            update(GitSpotReleaseCronLogModel)
            .where(GitSpotReleaseCronLogModel.id == run_id)
            .values(status="failed", completed_at=utc_now(), error_message=error_message, errors=errors or [error_message])
        )
        async with self.session_factory() as session:
            await session.execute(stmt)
            await session.commit()


class SqlAlchemyRepositoryStore:
    """Upserts GitHub repositories into the catalog table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def upsert_repository(self, record: GitHubRepositoryRecord) -> bool:
        """Insert or update the repository with ``record.github_id``; return True when inserted."""
        if not record.github_id or not record.full_name:
            raise ValueError("Repository record requires github_id and full_name")
        values = {
            "full_name": record.full_name,
            "name": record.name,
            "owner_login": record.owner_login,
            "html_url": record.html_url,
            "description": record.description,
            "is_private": record.is_private,
            "is_fork": record.is_fork,
            "is_archived": record.is_archived,
            "default_branch": record.default_branch,
            "pushed_at": record.pushed_at,
        }
        async with self.session_factory() as session:
            result = await session.execute(select(GitHubRepositoryModel).where(GitHubRepositoryModel.github_id == record.github_id))
            model = result.scalar_one_or_none()
            created = model is None
            if model is None:
                session.add(GitHubRepositoryModel(github_id=record.github_id, **values))
            else:
                for key, value in values.items():
                    setattr(model, key, value)
            await session.commit()
        return created
