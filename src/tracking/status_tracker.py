# src/tracking/status_tracker.py - v1
"""Per-file status state machine.

Volatile by design: nothing here is persisted. The cache bootstrap rebuilds
the tracker from the result store on every start.

    not_detected -> queued -> passed | no_issues | failed | server_down
    passed | no_issues -> outdated        (content changed, filters changed)
    any -> removed                        (file deleted)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Sequence

from smelltrack.cache.hashing import normalize_path
from smelltrack.core.events import Subscribers, Unsubscribe
from smelltrack.core.models import FileStatus, Smell
from smelltrack.tracking.models import FileRecord, StatusChange

logger = logging.getLogger(__name__)


class StatusTracker:
    """In-memory map of normalized path to status and last known smells."""

    def __init__(self) -> None:
        self._statuses: dict[str, FileStatus] = {}
        self._smells: dict[str, list[Smell]] = {}
        self._changes: Subscribers[StatusChange] = Subscribers("status-tracker")

    def subscribe(self, callback: Callable[[StatusChange], None]) -> Unsubscribe:
        return self._changes.subscribe(callback)

    def set_status(self, path: str | Path, status: FileStatus) -> None:
        """Set status. Leaving a result status drops the remembered smells."""
        key = normalize_path(path)
        previous = self._statuses.get(key)
        self._statuses[key] = status
        if status not in (FileStatus.PASSED, FileStatus.NO_ISSUES):
            self._smells.pop(key, None)
        if previous != status:
            logger.debug("Status %s: %s -> %s", key, previous, status.value)
            self._changes.emit(StatusChange(path=key, previous=previous, current=status))

    def get_status(self, path: str | Path) -> FileStatus:
        return self._statuses.get(normalize_path(path), FileStatus.NOT_DETECTED)

    def set_smells(self, path: str | Path, smells: Sequence[Smell]) -> None:
        """Record a result set. Empty means no_issues, otherwise passed."""
        key = normalize_path(path)
        status = FileStatus.PASSED if smells else FileStatus.NO_ISSUES
        self.set_status(key, status)
        self._smells[key] = list(smells)

    def get_smells(self, path: str | Path) -> list[Smell] | None:
        smells = self._smells.get(normalize_path(path))
        return None if smells is None else list(smells)

    def mark_outdated(self, path: str | Path) -> None:
        self.set_status(path, FileStatus.OUTDATED)

    def is_outdated(self, path: str | Path) -> bool:
        return self.get_status(path) == FileStatus.OUTDATED

    def remove_file(self, path: str | Path) -> bool:
        """Forget a file entirely.

        Returns:
            True if the tracker knew about the file.
        """
        key = normalize_path(path)
        previous = self._statuses.pop(key, None)
        had_smells = self._smells.pop(key, None) is not None
        if previous is None and not had_smells:
            return False
        self._changes.emit(StatusChange(path=key, previous=previous, current=None))
        return True

    def reset_all(self) -> None:
        """Drop every status and smell list."""
        paths = list(self._statuses)
        self._statuses.clear()
        self._smells.clear()
        for key in paths:
            self._changes.emit(StatusChange(path=key, current=None))

    def tracked_paths(self) -> list[str]:
        return list(self._statuses)

    def snapshot(self) -> dict[str, FileRecord]:
        """Copy of the current state, keyed by normalized path."""
        return {
            key: FileRecord(path=key, status=status, smells=self.get_smells(key))
            for key, status in self._statuses.items()
        }

    def counts(self) -> dict[FileStatus, int]:
        totals: dict[FileStatus, int] = {}
        for status in self._statuses.values():
            totals[status] = totals.get(status, 0) + 1
        return totals

    def __len__(self) -> int:
        return len(self._statuses)
