"""Protocols for the persistence the synchronization engine depends on."""

from typing import Protocol

from gitspot_sync.synchronize.models import GitHubRepositoryRecord, Mapping, Watermark
from gitspot_sync.synchronize.results import MappingResult, RunSummary


class MappingRepository(Protocol):
    """Loads mappings and stores their watermarks."""

    async def list_mappings(self, mapping_id: int | None = None) -> list[Mapping]:
        """Return mappings newest first, optionally only the one with ``mapping_id``."""
        ...

    async def save_watermark(self, mapping_id: int, watermark: Watermark) -> None:
        """Persist ``watermark`` on the mapping with ``mapping_id``."""
        ...


class RunLogRepository(Protocol):
    """Stores the audit trail of synchronization runs."""

    async def create_run(self) -> int: ...

    async def set_mappings_found(self, run_id: int, count: int) -> None: ...

    async def add_mapping_outcome(self, run_id: int, result: MappingResult) -> bool:
        """Store ``result`` for the run; return False when an outcome for that mapping already exists."""
        ...

    async def finalize_run(self, run_id: int, summary: RunSummary) -> None: ...

    async def fail_run(self, run_id: int, error_message: str, errors: list[str] | None = None) -> None: ...


class RepositoryStore(Protocol):
    """Stores repositories listed from GitHub."""

    async def upsert_repository(self, record: GitHubRepositoryRecord) -> bool:
        """Insert or update ``record`` by GitHub ID; return True if it was inserted."""
        ...
