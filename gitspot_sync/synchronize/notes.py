"""Renders GitHub releases into HubSpot note bodies."""

from functools import lru_cache
from pathlib import Path

import jinja2
import structlog

from gitspot_sync.synchronize.models import ReleaseRecord, RepositoryIdentity
from gitspot_sync.utils.constants import MAX_RELEASE_BODY_LENGTH, RELEASE_NOTE_TEMPLATE_NAME, UNKNOWN_RELEASE_TAG
from gitspot_sync.utils.templates import TEMPLATES_DIRECTORY, construct_jinja2_template_from_file, render_template
from gitspot_sync.utils.truncation import truncate_text

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class ReleaseNoteFormatter:
    """Formats a release as a bounded, HTML-escaped HubSpot note body.

    All interpolated text is escaped by the template environment. Optional
    release fields that are absent are left out of the note entirely.
    """

    def __init__(self, template_path: Path | None = None, max_body_length: int = MAX_RELEASE_BODY_LENGTH) -> None:
        """Load the note template once so every release is rendered identically."""
        self.template: jinja2.Template = construct_jinja2_template_from_file(template_path or TEMPLATES_DIRECTORY / RELEASE_NOTE_TEMPLATE_NAME)
        self.max_body_length = max_body_length

    def format(self, repository: RepositoryIdentity, release: ReleaseRecord) -> str:
        """Render the note body for ``release`` of ``repository``."""
        body = (release.body or "").strip()
        if len(body) > self.max_body_length:
            logger.debug("Truncated release body", repository=repository.full_name, tag_name=release.tag_name, max_length=self.max_body_length)
            body = truncate_text(body, self.max_body_length)

        published_at = release.published_at.strftime("%Y-%m-%dT%H:%M:%SZ") if release.published_at else None
        return render_template(
            self.template,
            {
                "repository_full_name": repository.full_name,
                "repository_url": repository.html_url,
                "release_tag": release.tag_name or UNKNOWN_RELEASE_TAG,
                "release_name": release.name,
                "release_url": release.html_url,
                "published_at": published_at,
                "release_body": body or None,
            },
        )


@lru_cache(maxsize=1)
def _default_formatter() -> ReleaseNoteFormatter:
    return ReleaseNoteFormatter()


def format_release_note(repository: RepositoryIdentity, release: ReleaseRecord) -> str:
    """Render the note body for ``release`` with the default template."""
    return _default_formatter().format(repository, release)
