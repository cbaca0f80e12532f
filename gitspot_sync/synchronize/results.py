"""Contains results of release synchronization runs."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MappingStatus(str, Enum):
    """Terminal status of a single mapping within a run."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


class _CamelCaseModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MappingResult(_CamelCaseModel):
    """Outcome of synchronizing one mapping."""

    model_config = ConfigDict(frozen=True)

    mapping_id: int
    status: MappingStatus
    notes_created: int = 0
    error_message: str | None = None


class RunSummary(_CamelCaseModel):
    """Aggregated results of one synchronization run."""

    mappings_processed: int = 0
    notes_created: int = 0
    skipped: int = 0
    errors: list[str] = Field(default_factory=list)
    mapping_results: list[MappingResult] = Field(default_factory=list)

    def record(self, result: MappingResult) -> None:
        """Append a mapping outcome, counting skipped mappings and collecting failures."""
        if result.status == MappingStatus.SKIPPED:
            self.skipped += 1
        if result.status == MappingStatus.FAILED and result.error_message:
            self.errors.append(result.error_message)
        self.mapping_results.append(result)

    def count(self, status: MappingStatus) -> int:
        """Return how many mappings finished with ``status``."""
        return sum(1 for result in self.mapping_results if result.status == status)

    def to_response(self) -> dict[str, Any]:
        """Serialize with the camelCase keys the HTTP surface returns."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RepositorySyncResult(BaseModel):
    """Results of synchronizing the GitHub repository catalog."""

    created: int = 0
    updated: int = 0
    errors: list[str] = Field(default_factory=list)
