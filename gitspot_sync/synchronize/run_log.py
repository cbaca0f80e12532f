"""Best-effort audit recording of release synchronization runs.

A failure to record never affects the run itself: every method logs the
error and returns normally.
"""

import structlog

from gitspot_sync.synchronize.results import MappingResult, RunSummary
from gitspot_sync.synchronize.types import RunLogRepository

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class RunLogRecorder:
    """Records one run and its per-mapping outcomes through a RunLogRepository."""

    def __init__(self, repository: RunLogRepository) -> None:
        self.repository = repository
        self.run_id: int | None = None

    async def start(self) -> int | None:
        """Create the run row and return its ID, or None if it could not be created."""
        try:
            self.run_id = await self.repository.create_run()
        except Exception as exc:
            logger.exception("Failed to create run log entry", error=str(exc))
            self.run_id = None
        else:
            logger.info("Started run log", run_id=self.run_id)
        return self.run_id

    async def mappings_found(self, count: int) -> None:
        """Store how many mappings the run loaded."""
        if self.run_id is None:
            return
        try:
            await self.repository.set_mappings_found(self.run_id, count)
        except Exception as exc:
            logger.exception("Failed to update mappings found", run_id=self.run_id, error=str(exc))

    async def record_outcome(self, result: MappingResult) -> None:
        """Store the outcome of one mapping; a duplicate outcome is ignored."""
        if self.run_id is None:
            return
        try:
            inserted = await self.repository.add_mapping_outcome(self.run_id, result)
        except Exception as exc:
            logger.exception("Failed to record mapping outcome", run_id=self.run_id, mapping_id=result.mapping_id, error=str(exc))
            return
        if not inserted:
            logger.debug("Mapping outcome already recorded", run_id=self.run_id, mapping_id=result.mapping_id)

    async def finish(self, summary: RunSummary) -> None:
        """Store the final counts and status of the run."""
        if self.run_id is None:
            return
        try:
            await self.repository.finalize_run(self.run_id, summary)
        except Exception as exc:
            logger.exception("Failed to finalize run log", run_id=self.run_id, error=str(exc))

    async def fail(self, error_message: str, errors: list[str] | None = None) -> None:
        """Mark the run failed for an error raised outside the per-mapping loop."""
        if self.run_id is None:
            return
        try:
            await self.repository.fail_run(self.run_id, error_message, errors)
        except Exception as exc:
            logger.exception("Failed to mark run log failed", run_id=self.run_id, error=str(exc))
