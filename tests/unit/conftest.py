"""Fixtures for unit tests."""

from datetime import datetime
from typing import Callable, Generator

import pytest
import structlog

from gitspot_sync.synchronize.models import Mapping, ReleaseRecord, RepositoryIdentity, Watermark


@pytest.fixture(autouse=True)
def configure_structlog_for_caplog() -> Generator[None, None, None]:
    """Configure structlog for use with caplog."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    yield
    structlog.reset_defaults()


def _make_release(release_id: int, published_at: datetime | None, tag_name: str | None = None, draft: bool = False, **kwargs: object) -> ReleaseRecord:
    """Build a release with a tag derived from its ID unless one is given."""
    return ReleaseRecord(
        id=release_id,
        tag_name=tag_name if tag_name is not None else f"v{release_id}",
        draft=draft,
        published_at=published_at,
        **kwargs,
    )


def _make_mapping(
    mapping_id: int = 1,
    company_id: str | None = "company-1",
    owner: str | None = "acme",
    name: str | None = "widgets",
    watermark: Watermark | None = None,
) -> Mapping:
    """Build a mapping for ``owner/name`` linked to ``company_id``."""
    return Mapping(
        id=mapping_id,
        company_id=company_id,
        repository=RepositoryIdentity(
            owner=owner,
            name=name,
            full_name=f"{owner}/{name}",
            html_url=f"https://github.com/{owner}/{name}",
            github_id="1001",
        ),
        watermark=watermark or Watermark(),
    )


@pytest.fixture
def make_release() -> Callable[..., ReleaseRecord]:
    """Factory for releases."""
    return _make_release


@pytest.fixture
def make_mapping() -> Callable[..., Mapping]:
    """Factory for mappings."""
    return _make_mapping
