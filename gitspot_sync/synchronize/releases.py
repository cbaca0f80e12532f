"""Synchronizes new GitHub releases into HubSpot company notes."""

import asyncio
import time
from datetime import datetime
from typing import Awaitable, Callable

import structlog

from gitspot_sync.exceptions import InvalidMappingError, RateLimitedError, UpstreamError
from gitspot_sync.github.abc import GitHubClientBase
from gitspot_sync.hubspot.client import NotePublisher
from gitspot_sync.synchronize.cursor import evaluate_cursor
from gitspot_sync.synchronize.models import Mapping
from gitspot_sync.synchronize.notes import ReleaseNoteFormatter
from gitspot_sync.synchronize.results import MappingResult, MappingStatus, RunSummary
from gitspot_sync.synchronize.run_log import RunLogRecorder
from gitspot_sync.synchronize.types import MappingRepository
from gitspot_sync.utils.constants import DEFAULT_PUBLISH_DELAY_SECONDS, DEFAULT_RELEASE_FETCH_LIMIT
from gitspot_sync.utils.helpers import utc_now

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def validate_mapping(mapping: Mapping) -> tuple[str, str, str]:
    """Return the company ID, repository owner and repository name of ``mapping``.

    Raises:
        InvalidMappingError: One of the identifiers is missing.
    """
    if not mapping.company_id:
        raise InvalidMappingError("HubSpot company missing companyId")
    repository = mapping.repository
    if not repository.owner or not repository.name:
        raise InvalidMappingError(f"GitHub repo missing owner/name ({repository.full_name or repository.github_id})")
    return mapping.company_id, repository.owner, repository.name


class ReleaseSyncRunner:
    """Publishes one HubSpot note per new GitHub release for every mapping.

    Mappings are processed one at a time. A failure on one mapping is
    recorded in the run summary and does not stop the others. Notes already
    published for a mapping that later fails are not rolled back and its
    watermark is left untouched, so those releases are published again on
    the next run.
    """

    def __init__(
        self,
        github: GitHubClientBase,
        publisher: NotePublisher,
        mappings: MappingRepository,
        formatter: ReleaseNoteFormatter | None = None,
        fetch_limit: int = DEFAULT_RELEASE_FETCH_LIMIT,
        publish_delay_seconds: float = DEFAULT_PUBLISH_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.github = github
        self.publisher = publisher
        self.mappings = mappings
        self.formatter = formatter or ReleaseNoteFormatter()
        self.fetch_limit = fetch_limit
        self.publish_delay_seconds = publish_delay_seconds
        self.sleep = sleep
        self.clock = clock

    async def run(self, mapping_id: int | None = None, dry_run: bool = False, recorder: RunLogRecorder | None = None) -> RunSummary:
        """Synchronize every mapping, or only ``mapping_id``, and return the run summary.

        In a dry run nothing is published, no watermark is written and
        ``recorder`` is not used; the summary still reports the notes that
        would have been created.

        Raises:
            Exception: Loading the mappings failed. The run log, if any, is marked failed.
        """
        if dry_run:
            recorder = None
        if recorder is not None:
            await recorder.start()

        start_time = time.time()
        logger.info("Starting release synchronization", mapping_id=mapping_id, dry_run=dry_run)
        try:
            mappings = await self.mappings.list_mappings(mapping_id)
        except Exception as exc:
            logger.exception("Failed to load mappings", mapping_id=mapping_id)
            if recorder is not None:
                await recorder.fail(str(exc) or "Failed to sync GitSpot releases")
            raise
        logger.info("Loaded mappings", mapping_count=len(mappings))
        if recorder is not None:
            await recorder.mappings_found(len(mappings))

        summary = RunSummary()
        for mapping in mappings:
            summary.mappings_processed += 1
            result = await self._sync_mapping(mapping, summary, dry_run)
            summary.record(result)
            if recorder is not None:
                await recorder.record_outcome(result)

        if recorder is not None:
            await recorder.finish(summary)
        logger.info(
            "Finished release synchronization",
            dry_run=dry_run,
            duration=round(time.time() - start_time, 2),
            mappings_processed=summary.mappings_processed,
            notes_created=summary.notes_created,
            skipped=summary.skipped,
            error_count=len(summary.errors),
        )
        return summary

    async def _sync_mapping(self, mapping: Mapping, summary: RunSummary, dry_run: bool) -> MappingResult:
        """Synchronize one mapping, turning any error into a failed result."""
        mapping_logger = logger.bind(mapping_id=mapping.id, repository=mapping.repository.full_name)
        notes_created = 0
        try:
            company_id, owner, repo_name = validate_mapping(mapping)
            releases = await self.github.list_releases(owner, repo_name, limit=self.fetch_limit)
            evaluation = evaluate_cursor(mapping.watermark, releases)
            if evaluation.is_skipped:
                mapping_logger.info("No new releases for mapping", fetched=len(releases))
                return MappingResult(mapping_id=mapping.id, status=MappingStatus.SKIPPED)

            mapping_logger.info("Publishing new releases", new_release_count=len(evaluation.new_releases), dry_run=dry_run)
            for index, release in enumerate(evaluation.new_releases):
                note_body = self.formatter.format(mapping.repository, release)
                if not dry_run:
                    if index > 0 and self.publish_delay_seconds > 0:
                        await self.sleep(self.publish_delay_seconds)
                    await self.publisher.create_company_note(company_id, note_body, self.clock())
                notes_created += 1
                summary.notes_created += 1
                mapping_logger.debug("Published release note", tag_name=release.tag_name, release_id=release.id, dry_run=dry_run)

            if not dry_run and evaluation.next_watermark is not None:
                await self.mappings.save_watermark(mapping.id, evaluation.next_watermark)
                mapping_logger.info(
                    "Advanced watermark",
                    last_release_id=evaluation.next_watermark.last_release_id,
                    last_release_tag_name=evaluation.next_watermark.last_release_tag_name,
                )
            return MappingResult(mapping_id=mapping.id, status=MappingStatus.SUCCESS, notes_created=notes_created)
        except InvalidMappingError as exc:
            mapping_logger.warning("Invalid mapping", reason=exc.reason)
            return self._failed(mapping, exc, notes_created)
        except RateLimitedError as exc:
            mapping_logger.warning("Rate limited while synchronizing mapping", service=exc.service, retry_after=exc.retry_after)
            return self._failed(mapping, exc, notes_created)
        except UpstreamError as exc:
            mapping_logger.error("Upstream error while synchronizing mapping", service=exc.service, status_code=exc.status_code)
            return self._failed(mapping, exc, notes_created)
        except Exception as exc:
            mapping_logger.exception("Unexpected error while synchronizing mapping")
            return self._failed(mapping, exc, notes_created)

    @staticmethod
    def _failed(mapping: Mapping, exc: Exception, notes_created: int) -> MappingResult:
        return MappingResult(
            mapping_id=mapping.id,
            status=MappingStatus.FAILED,
            notes_created=notes_created,
            error_message=f"Mapping {mapping.id}: {str(exc) or 'Unknown error'}",
        )
