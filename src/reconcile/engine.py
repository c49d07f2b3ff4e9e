# src/reconcile/engine.py - v2
"""Change reconciliation engine.

Keeps the result store and the status tracker honest while files are
created, edited, saved and deleted. The engine never analyses anything by
itself: an edit only invalidates, and fresh results come from an explicit
detection (or from the save hook when auto-lint is on).
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable

from smelltrack.cache.hashing import ContentReadError, hash_file, normalize_path
from smelltrack.cache.result_store import ResultStore
from smelltrack.core.events import Subscribers, Unsubscribe
from smelltrack.core.models import RESULT_STATUSES
from smelltrack.logging.context import operation_context
from smelltrack.reconcile.models import EventKind, WorkspaceEvent
from smelltrack.reconcile.watcher import PollingWatcher
from smelltrack.tracking.status_tracker import StatusTracker

logger = logging.getLogger(__name__)

Detector = Callable[[str], Awaitable[Any]]


class ChangeReconciliationEngine:
    """Applies workspace events to the result store and the tracker."""

    def __init__(
        self,
        workspace_root: str | Path | None,
        result_store: ResultStore,
        tracker: StatusTracker,
        patterns: Iterable[str] = ("*.py",),
        ignore_dirs: Iterable[str] = (),
        interval_s: float = 1.0,
        carry_cache_on_rename: bool = True,
        auto_lint_on_save: bool = False,
        detector: Detector | None = None,
    ) -> None:
        self._results = result_store
        self._tracker = tracker
        self._carry_on_rename = carry_cache_on_rename
        self._auto_lint = auto_lint_on_save
        self._detector = detector
        self._refresh: Subscribers[str] = Subscribers("reconcile-refresh")
        self._task: asyncio.Task[None] | None = None
        self._watcher: PollingWatcher | None = None
        if workspace_root is not None:
            self._watcher = PollingWatcher(
                workspace_root, patterns=patterns, ignore_dirs=ignore_dirs, interval_s=interval_s
            )

    @property
    def watcher(self) -> PollingWatcher | None:
        return self._watcher

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def on_refresh(self, callback: Callable[[str], None]) -> Unsubscribe:
        """Called with the affected path whenever views should re-render."""
        return self._refresh.subscribe(callback)

    def set_detector(self, detector: Detector | None) -> None:
        self._detector = detector

    def _accepts(self, path: str | Path) -> bool:
        return self._watcher is not None and self._watcher.matches(path)

    async def _had_entry(self, key: str) -> bool:
        if await self._results.is_tracked(key):
            return True
        # Result shown without a stored association, e.g. older state files
        return self._tracker.get_status(key) in RESULT_STATUSES

    # --- Event handlers ---

    async def handle_created(self, path: str | Path) -> None:
        if not self._accepts(path):
            return
        key = normalize_path(path)
        with operation_context("created", key):
            if self._carry_on_rename:
                await self._carry_forward(key)
            self._refresh.emit(key)

    async def _carry_forward(self, key: str) -> None:
        """Reuse a cached result when a new file has the content of a
        file that no longer exists (a rename or move)."""
        try:
            digest = hash_file(key)
        except ContentReadError as e:
            logger.warning("Cannot hash new file %s: %s", key, e)
            return
        if not await self._results.has_hash(digest):
            return
        paths = await self._results.paths_for_hash(digest)
        if key in paths:
            return
        previous = next((p for p in paths if not os.path.exists(p)), None)
        if previous is None:
            return
        await self._results.reassociate(digest, key, replaces=previous)
        smells = await self._results.get_by_hash(digest)
        if smells is not None:
            self._tracker.set_smells(key, smells)
            logger.info("Carried cached result from %s to %s", previous, key)

    async def handle_changed(self, path: str | Path) -> None:
        if not self._accepts(path):
            return
        key = normalize_path(path)
        with operation_context("changed", key):
            if not await self._had_entry(key):
                return
            displaced: list[str] = []
            try:
                displaced = await self._results.clear_for_path(key)
            except ContentReadError as e:
                logger.warning("Cannot read changed file %s: %s", key, e)
            self._tracker.mark_outdated(key)
            logger.debug("Marked %s outdated", key)
            self._refresh.emit(key)
            # New content matched files whose shared entry was just dropped
            for other in displaced:
                if self._tracker.get_status(other) in RESULT_STATUSES:
                    self._tracker.mark_outdated(other)
                    self._refresh.emit(other)

    async def handle_deleted(self, path: str | Path) -> None:
        if not self._accepts(path):
            return
        key = normalize_path(path)
        with operation_context("deleted", key):
            cleared = False
            if await self._results.is_tracked(key):
                cleared = await self._results.clear_by_known_path(key)
            forgotten = self._tracker.remove_file(key)
            if cleared or forgotten:
                logger.debug("Forgot deleted file %s", key)
                self._refresh.emit(key)

    async def handle_saved(self, path: str | Path) -> None:
        """Editor save: invalidate like a change, then optionally re-detect."""
        if not self._accepts(path):
            return
        await self.handle_changed(path)
        if self._auto_lint and self._detector is not None:
            key = normalize_path(path)
            with operation_context("auto-lint", key):
                await self._detector(key)

    async def handle_event(self, event: WorkspaceEvent) -> None:
        handlers = {
            EventKind.CREATED: self.handle_created,
            EventKind.CHANGED: self.handle_changed,
            EventKind.DELETED: self.handle_deleted,
            EventKind.SAVED: self.handle_saved,
        }
        await handlers[event.kind](event.path)

    # --- Lifecycle ---

    def start(self) -> bool:
        """Start watching. Returns False when no workspace root is configured."""
        if self._watcher is None:
            logger.warning("No workspace root configured, change reconciliation not started")
            return False
        if self.running:
            return True
        self._watcher.prime()
        self._task = asyncio.get_running_loop().create_task(
            self._watcher.run(self.handle_event)
        )
        logger.info("Watching %s", self._watcher.root)
        return True

    async def stop(self) -> None:
        if self._watcher is not None:
            self._watcher.stop()
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
