"""Decides which releases are new for a mapping since its last synchronization.

The watermark stored on a mapping may carry a publish timestamp, a release ID,
or both. Whenever a timestamp has been recorded it is the only thing compared:
a release is new when it was published strictly after the watermark. The
release ID is consulted only for mappings that have never recorded a
timestamp. Releases republished with an older timestamp than the watermark
are therefore never synchronized again, even when their ID is higher.
"""

from dataclasses import dataclass, field

import structlog

from gitspot_sync.synchronize.models import ReleaseRecord, Watermark

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CursorEvaluation:
    """Releases that still need to be published, oldest first, and the watermark to persist afterwards."""

    new_releases: list[ReleaseRecord] = field(default_factory=list)
    next_watermark: Watermark | None = None

    @property
    def is_skipped(self) -> bool:
        """Nothing new to publish for the mapping."""
        return not self.new_releases


def is_newer_than_watermark(release: ReleaseRecord, watermark: Watermark) -> bool:
    """Return True if ``release`` comes after ``watermark``."""
    if watermark.last_release_published_at is not None:
        return release.published_at is not None and release.published_at > watermark.last_release_published_at
    if watermark.last_release_id is not None:
        return release.id > watermark.last_release_id
    return True


def evaluate_cursor(watermark: Watermark, releases: list[ReleaseRecord]) -> CursorEvaluation:
    """Return the new releases in ascending publish order and the next watermark.

    Args:
        watermark: The watermark currently persisted on the mapping.
        releases: Releases fetched from GitHub, in any order.

    Returns:
        A CursorEvaluation. When no publishable release is newer than the
        watermark, the evaluation is empty and carries no next watermark.
    """
    publishable = [release for release in releases if release.is_publishable]
    if not publishable:
        logger.debug("No publishable releases", fetched=len(releases))
        return CursorEvaluation()

    # sorted() is stable, so releases sharing a publish time keep their fetched order
    ordered = sorted(publishable, key=lambda release: release.published_at)  # type: ignore[arg-type, return-value]
    new_releases = [release for release in ordered if is_newer_than_watermark(release, watermark)]
    if not new_releases:
        logger.debug(
            "No releases newer than watermark",
            publishable=len(publishable),
            last_release_id=watermark.last_release_id,
            last_release_published_at=watermark.last_release_published_at,
        )
        return CursorEvaluation()

    next_watermark = Watermark.from_release(new_releases[-1], previous=watermark)
    logger.debug(
        "Found new releases",
        new_release_tags=[release.tag_name for release in new_releases],
        next_release_id=next_watermark.last_release_id,
    )
    return CursorEvaluation(new_releases=new_releases, next_watermark=next_watermark)
