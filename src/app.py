# src/app.py - v1
"""Composition root.

Builds exactly one instance of each component for a workspace and wires
them together by reference. Nothing in the package holds module-level
state, so several workspaces can live in one process.

Usage:
    app = SmellTrackApp.create(settings)
    await app.start()
    status = await app.detection.detect_file("pkg/module.py")
    await app.stop()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from smelltrack.analysis.base_client import BaseAnalysisClient
from smelltrack.analysis.http_client import HttpAnalysisClient
from smelltrack.analysis.server_status import ServerStatusMonitor
from smelltrack.cache.base_state_store import BaseStateStore
from smelltrack.cache.cache_factory import create_state_store
from smelltrack.cache.hashing import workspace_namespace
from smelltrack.cache.result_store import ResultStore
from smelltrack.config.settings import Settings
from smelltrack.detection.service import DetectionService
from smelltrack.filters.config_store import FilterConfigStore
from smelltrack.filters.coordinator import ConfirmCallback, FilterInvalidationCoordinator
from smelltrack.logging.context import set_workspace_context
from smelltrack.reconcile.bootstrap import run_cache_bootstrap
from smelltrack.reconcile.engine import ChangeReconciliationEngine
from smelltrack.reconcile.models import BootstrapSummary
from smelltrack.tracking.status_tracker import StatusTracker

logger = logging.getLogger(__name__)


@dataclass
class SmellTrackApp:
    """All components for one workspace."""

    settings: Settings
    workspace_root: Path | None
    state_store: BaseStateStore
    results: ResultStore
    tracker: StatusTracker
    client: BaseAnalysisClient
    server_status: ServerStatusMonitor
    filters: FilterInvalidationCoordinator
    detection: DetectionService
    engine: ChangeReconciliationEngine

    @classmethod
    def create(
        cls,
        settings: Settings | None = None,
        state_store: BaseStateStore | None = None,
        client: BaseAnalysisClient | None = None,
        confirm: ConfirmCallback | None = None,
    ) -> SmellTrackApp:
        """Build the component graph.

        Args:
            settings: Application settings. Loaded from .env if None.
            state_store: Persistence backend. Built from settings if None.
            client: Analysis backend client. HTTP client if None.
            confirm: Asked before filter changes invalidate results.
        """
        settings = settings or Settings()
        root = settings.resolved_workspace_root
        set_workspace_context(str(root) if root else None)

        state_store = state_store or create_state_store(
            settings, namespace=workspace_namespace(root)
        )
        results = ResultStore(state_store)
        tracker = StatusTracker()
        client = client or HttpAnalysisClient(
            settings.analyzer_url, timeout_s=settings.analyzer_timeout_s
        )
        server_status = ServerStatusMonitor(client, interval_s=settings.health_poll_interval_s)
        filters = FilterInvalidationCoordinator(
            FilterConfigStore(settings.filter_config_path), results, tracker, confirm=confirm
        )
        detection = DetectionService(
            client,
            results,
            tracker,
            server_status,
            enabled_smells=filters.enabled_for_backend,
            patterns=settings.watch_patterns_list,
            ignore_dirs=settings.watch_ignore_dirs_set,
        )
        engine = ChangeReconciliationEngine(
            root,
            results,
            tracker,
            patterns=settings.watch_patterns_list,
            ignore_dirs=settings.watch_ignore_dirs_set,
            interval_s=settings.watch_interval_s,
            carry_cache_on_rename=settings.carry_cache_on_rename,
            auto_lint_on_save=settings.auto_lint_on_save,
            detector=detection.detect_file,
        )
        logger.debug("Components built for workspace %s (%s cache)", root, settings.cache_backend)
        return cls(
            settings=settings,
            workspace_root=root,
            state_store=state_store,
            results=results,
            tracker=tracker,
            client=client,
            server_status=server_status,
            filters=filters,
            detection=detection,
            engine=engine,
        )

    async def bootstrap(self) -> BootstrapSummary:
        return await run_cache_bootstrap(self.results, self.tracker, self.workspace_root)

    async def start(self, watch: bool = True) -> BootstrapSummary:
        """Bootstrap from cache, probe the backend, then start watching."""
        summary = await self.bootstrap()
        await self.server_status.check()
        if watch:
            self.server_status.start()
            self.engine.start()
        return summary

    async def stop(self) -> None:
        await self.engine.stop()
        await self.server_status.stop()
        await self.client.close()
        self.state_store.close()
