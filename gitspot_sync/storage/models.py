"""Persistence models for the release synchronization engine.

Five tables:
- github_repositories: repository catalog synchronized from GitHub
- hubspot_companies: HubSpot companies mappings point at
- gitspot_company_mappings: one row per (repository, company) pair, plus the release watermark
- gitspot_release_cron_logs: one row per recorded synchronization run
- gitspot_release_cron_log_mappings: per-mapping outcome of a recorded run
"""

from datetime import datetime

from sqlalchemy import JSON, BigInteger, Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gitspot_sync.storage.database import Base
from gitspot_sync.utils.helpers import utc_now


class GitHubRepositoryModel(Base):
    """A GitHub repository known to the catalog, keyed by its GitHub ID."""

    __tablename__ = "github_repositories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    github_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(300), nullable=False)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    owner_login: Mapped[str | None] = mapped_column(String(200), nullable=True)
    html_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_private: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_fork: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    default_branch: Mapped[str | None] = mapped_column(String(200), nullable=True)
    pushed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=utc_now, nullable=True)


class HubSpotCompanyModel(Base):
    """A HubSpot company; ``company_id`` is the ID HubSpot assigned to it."""

    __tablename__ = "hubspot_companies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    name: Mapped[str | None] = mapped_column(String(300), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)


class GitSpotCompanyMappingModel(Base):
    """Links one GitHub repository to one HubSpot company and tracks the last synchronized release."""

    __tablename__ = "gitspot_company_mappings"
    __table_args__ = (UniqueConstraint("github_repository_id", "hubspot_company_id", name="uq_gitspot_mapping_repository_company"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    github_repository_id: Mapped[int] = mapped_column(ForeignKey("github_repositories.id"), nullable=False)
    hubspot_company_id: Mapped[int] = mapped_column(ForeignKey("hubspot_companies.id"), nullable=False)
    last_release_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    last_release_tag_name: Mapped[str | None] = mapped_column(String(300), nullable=True)
    last_release_published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=utc_now, nullable=True)

    repository: Mapped[GitHubRepositoryModel] = relationship()
    company: Mapped[HubSpotCompanyModel] = relationship()


class GitSpotReleaseCronLogModel(Base):
    """One recorded synchronization run."""

    __tablename__ = "gitspot_release_cron_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    status: Mapped[str] = mapped_column(String(20), default="running", nullable=False)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    mappings_found: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    mappings_executed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    mappings_failed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    mappings_skipped: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    notes_created: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    errors: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    mapping_outcomes: Mapped[list["GitSpotReleaseCronLogMappingModel"]] = relationship(back_populates="cron_log")


class GitSpotReleaseCronLogMappingModel(Base):
    """The outcome of one mapping within a recorded run."""

    __tablename__ = "gitspot_release_cron_log_mappings"
    __table_args__ = (UniqueConstraint("cron_log_id", "mapping_id", name="uq_cron_log_mapping"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cron_log_id: Mapped[int] = mapped_column(ForeignKey("gitspot_release_cron_logs.id"), nullable=False)
    mapping_id: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    notes_created: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)

    cron_log: Mapped[GitSpotReleaseCronLogModel] = relationship(back_populates="mapping_outcomes")
