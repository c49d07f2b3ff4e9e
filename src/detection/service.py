# src/detection/service.py - v2
"""Detection orchestration for single files and folders.

Order of checks for one file:
    1. non-matching file       -> skipped
    2. cached entry            -> status from cache, path associated, no network
    3. backend down            -> server_down, no network
    4. no smells enabled       -> warning, nothing changes
    5. otherwise               -> queued, remote call, write, final status
"""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path
from typing import Any, Callable, Iterable

from smelltrack.analysis.base_client import BaseAnalysisClient
from smelltrack.analysis.models import AnalysisFailure, Unavailable
from smelltrack.analysis.server_status import ServerStatusMonitor
from smelltrack.cache.hashing import ContentReadError, hash_file, normalize_path
from smelltrack.cache.result_store import ResultStore
from smelltrack.core.models import FileStatus
from smelltrack.logging.context import operation_context
from smelltrack.tracking.status_tracker import StatusTracker

logger = logging.getLogger(__name__)

EnabledSmellsProvider = Callable[[], dict[str, dict[str, Any]]]


class DetectionService:
    """Runs detection through the cache, the server monitor and the client."""

    def __init__(
        self,
        client: BaseAnalysisClient,
        result_store: ResultStore,
        tracker: StatusTracker,
        server_status: ServerStatusMonitor,
        enabled_smells: EnabledSmellsProvider,
        patterns: Iterable[str] = ("*.py",),
        ignore_dirs: Iterable[str] = (),
    ) -> None:
        self._client = client
        self._results = result_store
        self._tracker = tracker
        self._server = server_status
        self._enabled_smells = enabled_smells
        self._patterns = tuple(patterns)
        self._ignore_dirs = frozenset(ignore_dirs)

    def matches(self, path: str | Path) -> bool:
        return any(fnmatch.fnmatch(Path(path).name, p) for p in self._patterns)

    async def detect_file(self, path: str | Path) -> FileStatus | None:
        """Detect smells in one file.

        Returns:
            The resulting status, or None when nothing was done.
        """
        key = normalize_path(path)
        if not self.matches(key):
            logger.debug("Skipping non-matching file %s", key)
            return None

        with operation_context("detect", key):
            try:
                digest = hash_file(key)
            except ContentReadError as e:
                logger.error("Cannot read %s: %s", key, e)
                self._tracker.set_status(key, FileStatus.FAILED)
                return FileStatus.FAILED

            cached = await self._results.get_by_hash(digest)
            if cached is not None:
                logger.info("Using cached results for %s", Path(key).name)
                await self._results.associate(digest, key)
                self._tracker.set_smells(key, cached)
                return self._tracker.get_status(key)

            if self._server.is_down:
                logger.warning("%s", Unavailable(key))
                self._tracker.set_status(key, FileStatus.SERVER_DOWN)
                return FileStatus.SERVER_DOWN

            enabled = self._enabled_smells()
            if not enabled:
                logger.warning("No smell detectors enabled, not analysing %s", Path(key).name)
                return None

            self._tracker.set_status(key, FileStatus.QUEUED)
            return await self._analyse(key, digest, enabled)

    async def _analyse(
        self, key: str, digest: str, enabled: dict[str, dict[str, Any]]
    ) -> FileStatus:
        try:
            result = await self._client.detect(key, enabled)
        except AnalysisFailure as e:
            logger.error("Analysis failed: %s", e)
            self._tracker.set_status(key, FileStatus.FAILED)
            return FileStatus.FAILED
        except Exception:
            logger.exception("Analysis of %s raised unexpectedly", key)
            self._tracker.set_status(key, FileStatus.FAILED)
            return FileStatus.FAILED

        if not result.ok:
            logger.error(
                "%s", AnalysisFailure(key, "backend returned an error", result.status_code)
            )
            self._tracker.set_status(key, FileStatus.FAILED)
            return FileStatus.FAILED

        stored = await self._results.set(key, result.findings, content_hash=digest)
        try:
            current = hash_file(key)
        except ContentReadError:
            current = None
        if current != digest:
            # Edited while the call was in flight; the entry belongs to the old content
            logger.info("%s changed during analysis, result kept for previous content", key)
            self._tracker.mark_outdated(key)
            return FileStatus.OUTDATED

        self._tracker.set_smells(key, stored)
        return self._tracker.get_status(key)

    def collect_files(self, folder: str | Path) -> list[str]:
        """Matching files under ``folder``, sorted, ignored directories skipped."""
        root = Path(normalize_path(folder))
        out: list[str] = []
        for f in sorted(root.rglob("*")):
            try:
                rel = f.relative_to(root)
            except ValueError:
                continue
            if any(part in self._ignore_dirs for part in rel.parts[:-1]):
                continue
            if f.is_file() and self.matches(f):
                out.append(normalize_path(f))
        return out

    async def detect_folder(self, folder: str | Path) -> dict[str, FileStatus | None]:
        """Detect every matching file under ``folder``, one at a time."""
        files = self.collect_files(folder)
        if not files:
            logger.warning("No matching files found in %s", folder)
            return {}
        logger.info("Analysing %d file(s) in %s", len(files), folder)
        results: dict[str, FileStatus | None] = {}
        for file in files:
            results[file] = await self.detect_file(file)
        return results
