# src/reconcile/models.py - v1
"""Workspace event and bootstrap summary models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class EventKind(str, Enum):
    CREATED = "created"
    CHANGED = "changed"
    DELETED = "deleted"
    SAVED = "saved"


class WorkspaceEvent(BaseModel):
    """One file-system or editor event for a single file."""

    kind: EventKind
    path: str


class BootstrapSummary(BaseModel):
    """Counts reported after replaying the persisted cache into the tracker."""

    valid: int = 0
    removed: int = 0
    with_findings: int = 0
    clean: int = 0
    outdated: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        return self.valid + self.removed + self.skipped
