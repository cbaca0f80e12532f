"""Data models shared by the release synchronization engine."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator

from gitspot_sync.utils.helpers import ensure_utc


class ReleaseRecord(BaseModel):
    """A GitHub release as seen by the synchronization engine."""

    id: int
    tag_name: str | None = None
    name: str | None = None
    html_url: str | None = None
    body: str | None = None
    draft: bool = False
    prerelease: bool = False
    published_at: datetime | None = None

    @field_validator("published_at")
    @classmethod
    def normalize_published_at(cls, value: datetime | None) -> datetime | None:
        """Store publish times as timezone-aware UTC values."""
        return ensure_utc(value)

    @property
    def is_publishable(self) -> bool:
        """A release is publishable once it is out of draft and has a publish time."""
        return not self.draft and self.published_at is not None


class RepositoryIdentity(BaseModel):
    """Identifies the GitHub repository a mapping tracks."""

    owner: str | None = None
    name: str | None = None
    full_name: str
    html_url: str | None = None
    github_id: str | None = None


class Watermark(BaseModel):
    """The last release synchronized for a mapping."""

    model_config = ConfigDict(frozen=True)

    last_release_id: int | None = None
    last_release_tag_name: str | None = None
    last_release_published_at: datetime | None = None

    @field_validator("last_release_published_at")
    @classmethod
    def normalize_published_at(cls, value: datetime | None) -> datetime | None:
        """Store watermark times as timezone-aware UTC values."""
        return ensure_utc(value)

    @classmethod
    def from_release(cls, release: ReleaseRecord, previous: "Watermark | None" = None) -> "Watermark":
        """Build the watermark that marks ``release`` as the newest synchronized release."""
        previous_tag = previous.last_release_tag_name if previous else None
        return cls(
            last_release_id=release.id,
            last_release_tag_name=release.tag_name or previous_tag,
            last_release_published_at=release.published_at,
        )


class Mapping(BaseModel):
    """A link between one GitHub repository and one HubSpot company."""

    id: int
    company_id: str | None = None
    repository: RepositoryIdentity
    watermark: Watermark = Watermark()


class GitHubRepositoryRecord(BaseModel):
    """A repository listed from GitHub, ready to be stored in the repository catalog."""

    github_id: str | None = None
    full_name: str | None = None
    name: str | None = None
    owner_login: str | None = None
    html_url: str | None = None
    description: str | None = None
    is_private: bool = False
    is_fork: bool = False
    is_archived: bool = False
    default_branch: str | None = None
    pushed_at: datetime | None = None

    @field_validator("pushed_at")
    @classmethod
    def normalize_pushed_at(cls, value: datetime | None) -> datetime | None:
        """Store push times as timezone-aware UTC values."""
        return ensure_utc(value)
