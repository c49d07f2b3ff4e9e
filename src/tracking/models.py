# src/tracking/models.py - v2
"""Status tracking models."""

from __future__ import annotations

from pydantic import BaseModel

from smelltrack.core.models import FileStatus, Smell


class StatusChange(BaseModel):
    """Emitted to tracker subscribers on every status transition."""

    path: str
    previous: FileStatus | None = None
    current: FileStatus | None = None


class FileRecord(BaseModel):
    """Snapshot of what the tracker knows about one file."""

    path: str
    status: FileStatus
    smells: list[Smell] | None = None

    @property
    def smell_count(self) -> int:
        return len(self.smells or [])
