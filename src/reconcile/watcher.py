# src/reconcile/watcher.py - v1
"""Polling workspace watcher.

Each poll compares a fresh ``(mtime_ns, size)`` listing of matching files
against the previous one. Events from one poll are ordered created, changed,
deleted so a rename surfaces its new path before the old one disappears.
"""

from __future__ import annotations

import asyncio
import fnmatch
import logging
from pathlib import Path
from typing import Awaitable, Callable, Iterable

from smelltrack.cache.hashing import is_within, normalize_path
from smelltrack.reconcile.models import EventKind, WorkspaceEvent

logger = logging.getLogger(__name__)

Snapshot = dict[str, tuple[int, int]]
EventHandler = Callable[[WorkspaceEvent], Awaitable[None]]


class PollingWatcher:
    """Detects file creation, modification and deletion under one root."""

    def __init__(
        self,
        root: str | Path,
        patterns: Iterable[str] = ("*.py",),
        ignore_dirs: Iterable[str] = (),
        interval_s: float = 1.0,
    ) -> None:
        self._root = Path(normalize_path(root))
        self._patterns = tuple(patterns)
        self._ignore_dirs = frozenset(ignore_dirs)
        self._interval = interval_s
        self._snapshot: Snapshot | None = None
        self._running = False

    @property
    def root(self) -> Path:
        return self._root

    def matches(self, path: str | Path) -> bool:
        """True for files under the root whose name matches a pattern and
        that do not sit inside an ignored directory."""
        key = normalize_path(path)
        if not is_within(key, self._root):
            return False
        rel = Path(key).relative_to(self._root)
        if any(part in self._ignore_dirs for part in rel.parts[:-1]):
            return False
        return any(fnmatch.fnmatch(rel.name, p) for p in self._patterns)

    def scan(self) -> Snapshot:
        out: Snapshot = {}
        try:
            for f in self._root.rglob("*"):
                try:
                    if not f.is_file() or not self.matches(f):
                        continue
                    st = f.stat()
                    out[normalize_path(f)] = (st.st_mtime_ns, st.st_size)
                except (OSError, ValueError):
                    continue
        except OSError as e:
            logger.warning("Cannot list %s: %s", self._root, e)
        return out

    def prime(self) -> None:
        """Take the baseline listing. Files present now produce no events."""
        self._snapshot = self.scan()
        logger.debug("Watching %d file(s) under %s", len(self._snapshot), self._root)

    def poll(self) -> list[WorkspaceEvent]:
        if self._snapshot is None:
            self.prime()
            return []
        current = self.scan()
        previous = self._snapshot
        self._snapshot = current

        created = [p for p in current if p not in previous]
        changed = [p for p in current if p in previous and current[p] != previous[p]]
        deleted = [p for p in previous if p not in current]
        return (
            [WorkspaceEvent(kind=EventKind.CREATED, path=p) for p in created]
            + [WorkspaceEvent(kind=EventKind.CHANGED, path=p) for p in changed]
            + [WorkspaceEvent(kind=EventKind.DELETED, path=p) for p in deleted]
        )

    async def run(self, handler: EventHandler) -> None:
        """Poll until ``stop()``; each event is awaited before the next."""
        self._running = True
        if self._snapshot is None:
            self.prime()
        while self._running:
            await asyncio.sleep(self._interval)
            for event in self.poll():
                try:
                    await handler(event)
                except Exception:
                    logger.exception("Handling %s event for %s failed", event.kind.value, event.path)

    def stop(self) -> None:
        self._running = False
