# src/core/models.py - v2
"""Core domain models: Smell, Occurrence, AdditionalInfo, FileStatus.

Smells arrive from the analysis backend in its camelCase wire format
(``messageId``, ``additionalInfo``, ``endLine``). Models accept both the wire
aliases and the Python field names, and serialize back to the wire format so
that persisted cache entries stay readable by the backend.
"""

from __future__ import annotations

from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class FileStatus(str, Enum):
    """Per-file detection status. Keyed by path, never by content hash."""

    NOT_DETECTED = "not_detected"
    QUEUED = "queued"
    PASSED = "passed"
    NO_ISSUES = "no_issues"
    FAILED = "failed"
    OUTDATED = "outdated"
    SERVER_DOWN = "server_down"


# Statuses that assert a current cache entry exists for the file.
RESULT_STATUSES: frozenset[FileStatus] = frozenset(
    {FileStatus.PASSED, FileStatus.NO_ISSUES}
)


class Occurrence(BaseModel):
    """Location of one occurrence of a smell inside a file."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    line: int
    column: int
    end_line: int | None = Field(default=None, alias="endLine")
    end_column: int | None = Field(default=None, alias="endColumn")


class AdditionalInfo(BaseModel):
    """Smell-specific extra data (repeated calls, string concat loops, ...)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    repetitions: int | None = None
    call_string: str | None = Field(default=None, alias="callString")
    concat_target: str | None = Field(default=None, alias="concatTarget")
    inner_loop_line: int | None = Field(default=None, alias="innerLoopLine")


class Smell(BaseModel):
    """A single immutable finding reported by the analysis backend.

    ``id`` is filled in when the smell is persisted into a cache entry. It is a
    digest of the smell's own content, used to reference a finding from UI
    actions, and plays no part in cache lookups.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type: str
    symbol: str
    message: str
    message_id: str = Field(alias="messageId")
    confidence: str
    path: str
    module: str
    obj: str | None = None
    occurrences: list[Occurrence] = Field(
        default_factory=list,
        validation_alias=AliasChoices("occurrences", "occurences"),
        serialization_alias="occurrences",
    )
    additional_info: AdditionalInfo = Field(
        default_factory=AdditionalInfo, alias="additionalInfo"
    )
    id: str | None = None

    def to_wire(self) -> dict:
        """Serialize to the backend's JSON shape (aliases, no nulls)."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
