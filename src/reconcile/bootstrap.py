# src/reconcile/bootstrap.py - v2
"""Startup reconciliation: rebuild tracker state from the persisted cache."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from smelltrack.cache.hashing import is_within
from smelltrack.cache.result_store import ResultStore
from smelltrack.reconcile.models import BootstrapSummary
from smelltrack.tracking.status_tracker import StatusTracker

logger = logging.getLogger(__name__)


async def run_cache_bootstrap(
    result_store: ResultStore,
    tracker: StatusTracker,
    workspace_root: str | Path | None,
) -> BootstrapSummary:
    """Replay every known path into the tracker.

    Paths outside the workspace or missing on disk are dropped from the
    cache. Surviving paths get ``passed``/``no_issues`` from their current
    entry, or ``outdated`` when only the bookkeeping survived. A failure on
    one path is logged and the sweep continues.

    Args:
        result_store: Persisted results and associations.
        tracker: Tracker to populate.
        workspace_root: Configured root. Nothing is touched when None.

    Returns:
        Per-outcome counts.
    """
    summary = BootstrapSummary()
    if workspace_root is None:
        logger.warning("No workspace root configured, skipping cache bootstrap")
        return summary

    paths = await result_store.all_known_paths()
    logger.info("Bootstrapping %d cached path(s) under %s", len(paths), workspace_root)

    for path in paths:
        try:
            if not is_within(path, workspace_root) or not os.path.isfile(path):
                logger.debug("Dropping cache for %s (outside workspace or missing)", path)
                await result_store.clear_by_known_path(path)
                tracker.remove_file(path)
                summary.removed += 1
                continue

            await result_store.prune_orphans(path)
            smells = await result_store.get(path)
            summary.valid += 1
            if smells is None:
                tracker.mark_outdated(path)
                summary.outdated += 1
            elif smells:
                tracker.set_smells(path, smells)
                summary.with_findings += 1
            else:
                tracker.set_smells(path, smells)
                summary.clean += 1
        except Exception as e:
            # Unreadable file or a failing backend call; the sweep goes on
            logger.warning("Skipping %s during bootstrap: %s", path, e)
            summary.skipped += 1

    logger.info(
        "Cache bootstrap: %d valid (%d with findings, %d clean, %d outdated), "
        "%d removed, %d skipped",
        summary.valid, summary.with_findings, summary.clean, summary.outdated,
        summary.removed, summary.skipped,
    )
    return summary
