# src/refactor/actions.py - v2
"""Apply or discard a refactoring proposed by the analysis backend.

The backend writes refactored copies to a temporary directory. Accepting
copies them over the originals, which changes their content, so their
cached results are cleared first while the old content is still on disk.
"""

from __future__ import annotations

import logging
import shutil
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field

from smelltrack.cache.hashing import ContentReadError, normalize_path
from smelltrack.cache.result_store import ResultStore
from smelltrack.core.models import RESULT_STATUSES, FileStatus, Smell
from smelltrack.tracking.status_tracker import StatusTracker

logger = logging.getLogger(__name__)

Detector = Callable[[str], Awaitable[Any]]


class ChangedFile(BaseModel):
    original: str
    refactored: str


class RefactoringOutcome(BaseModel):
    """Refactoring result as returned by the backend."""

    model_config = ConfigDict(populate_by_name=True)

    temp_dir: str = Field(alias="tempDir")
    target_file: ChangedFile = Field(alias="targetFile")
    affected_files: list[ChangedFile] = Field(default_factory=list, alias="affectedFiles")
    energy_saved: float | None = Field(default=None, alias="energySaved")
    target_smell: Smell | None = Field(default=None, alias="targetSmell")

    def all_files(self) -> list[ChangedFile]:
        return [self.target_file, *self.affected_files]


async def accept_refactoring(
    outcome: RefactoringOutcome,
    result_store: ResultStore,
    tracker: StatusTracker,
    detector: Detector | None = None,
) -> bool:
    """Write the refactored files into the workspace.

    Args:
        outcome: Backend refactoring result.
        result_store: Cache to clear for every modified file.
        tracker: Tracker to mark modified files outdated in.
        detector: Re-runs detection on the target afterwards when given.

    Returns:
        True if every file was copied.
    """
    files = outcome.all_files()
    for changed in files:
        try:
            displaced = await result_store.clear_for_path(changed.original)
        except ContentReadError as e:
            logger.warning("Could not clear cache for %s: %s", changed.original, e)
            continue
        # Unchanged files that shared the old content lost their entry too
        for other in displaced:
            if tracker.get_status(other) in RESULT_STATUSES:
                tracker.mark_outdated(other)

    logger.info("Applying refactoring to %s", outcome.target_file.original)
    try:
        for changed in files:
            shutil.copyfile(changed.refactored, changed.original)
            logger.debug("Updated %s", changed.original)
    except OSError as e:
        logger.error("Error applying refactoring: %s", e)
        for changed in files:
            tracker.mark_outdated(changed.original)
        return False

    for changed in files:
        tracker.mark_outdated(changed.original)
    if outcome.energy_saved is not None:
        logger.info("Refactoring saved an estimated %.6f kg CO2", outcome.energy_saved)

    if detector is not None:
        await detector(normalize_path(outcome.target_file.original))
    logger.info("Refactoring applied")
    return True


async def reject_refactoring(
    outcome: RefactoringOutcome,
    result_store: ResultStore,
    tracker: StatusTracker,
) -> FileStatus:
    """Discard the proposal and restore the target's status from the cache."""
    target = outcome.target_file.original
    try:
        cached = await result_store.get(target)
    except ContentReadError as e:
        logger.warning("Cannot read %s while discarding refactoring: %s", target, e)
        cached = None

    if cached is None:
        tracker.mark_outdated(target)
    else:
        tracker.set_smells(target, cached)
    logger.info("Refactoring changes discarded for %s", target)
    return tracker.get_status(target)
