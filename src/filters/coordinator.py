# src/filters/coordinator.py - v2
"""Filter invalidation coordinator.

Cached results do not record which filter configuration produced them, so
any change to enabled smells or their options invalidates every result in
the workspace. Bookkeeping (hash -> path) is left in place so the affected
files stay listed as outdated.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Awaitable, Callable

from smelltrack.cache.result_store import ResultStore
from smelltrack.core.events import Subscribers, Unsubscribe
from smelltrack.core.models import RESULT_STATUSES
from smelltrack.filters.catalog import default_configuration
from smelltrack.filters.config_store import FilterConfigStore
from smelltrack.filters.models import ConfirmChoice, FilterConfiguration, FilterSmellConfig
from smelltrack.tracking.status_tracker import StatusTracker

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[str], Awaitable[ConfirmChoice]]

CONFIRM_MESSAGE = (
    "Changing smell filters will invalidate existing analysis results. "
    "Do you want to continue?"
)


def coerce_option_value(current: int | float | str, raw: Any) -> int | float | str:
    """Convert ``raw`` to the type of the option's current value.

    Raises:
        ValueError: If a numeric option receives a non-numeric value.
    """
    if isinstance(current, str):
        return str(raw)
    if isinstance(current, int):
        if isinstance(raw, float) and raw.is_integer():
            return int(raw)
        return int(str(raw).strip())
    return float(str(raw).strip())


class FilterInvalidationCoordinator:
    """Owns the filter configuration and invalidates results when it changes."""

    def __init__(
        self,
        config_store: FilterConfigStore,
        result_store: ResultStore,
        tracker: StatusTracker,
        confirm: ConfirmCallback | None = None,
    ) -> None:
        self._config_store = config_store
        self._results = result_store
        self._tracker = tracker
        self._confirm = confirm
        self._config = config_store.load()
        self._invalidated: Subscribers[int] = Subscribers("filter-invalidation")

    @property
    def configuration(self) -> FilterConfiguration:
        return self._config

    def on_invalidated(self, callback: Callable[[int], None]) -> Unsubscribe:
        """Refresh hook, called with the number of affected paths."""
        return self._invalidated.subscribe(callback)

    def enabled_for_backend(self) -> dict[str, dict[str, Any]]:
        """Enabled smells as ``{key: {option: value}}`` for the analysis backend."""
        return {
            key: smell.option_values()
            for key, smell in self._config.smells.items()
            if smell.enabled
        }

    # --- Mutations ---

    async def toggle_smell(self, key: str) -> bool:
        """Flip one smell on or off.

        Returns:
            True if the change was applied, False if the user declined.

        Raises:
            KeyError: If the smell is unknown.
        """
        smell = self._require(key)
        if not await self._confirm_change():
            return False
        smell.enabled = not smell.enabled
        logger.info("Smell %s %s", key, "enabled" if smell.enabled else "disabled")
        await self._commit()
        return True

    async def set_enabled(self, key: str, enabled: bool) -> bool:
        """Set one smell's flag. A no-op when it already has that value."""
        if self._require(key).enabled == enabled:
            return False
        return await self.toggle_smell(key)

    async def set_all_enabled(self, enabled: bool) -> bool:
        if not await self._confirm_change():
            return False
        for smell in self._config.smells.values():
            smell.enabled = enabled
        logger.info("All smells %s", "enabled" if enabled else "disabled")
        await self._commit()
        return True

    async def update_option(self, key: str, option: str, value: Any) -> bool:
        """Change one analyzer option.

        Raises:
            KeyError: If the smell or the option is unknown.
            ValueError: If the value does not fit the option's type.
        """
        smell = self._require(key)
        if option not in smell.analyzer_options:
            raise KeyError(f"No analyzer option {option!r} for smell {key!r}")
        target = smell.analyzer_options[option]
        new_value = coerce_option_value(target.value, value)
        if not await self._confirm_change():
            return False
        target.value = new_value
        logger.info("Option %s.%s set to %r", key, option, new_value)
        await self._commit()
        return True

    async def reset_to_defaults(self) -> bool:
        if not await self._confirm_change():
            return False
        suppress = self._config.suppress_invalidation_warning
        self._config = default_configuration()
        self._config.suppress_invalidation_warning = suppress
        logger.info("Smell filters reset to defaults")
        await self._commit()
        return True

    # --- Invalidation ---

    async def invalidate_all(self) -> int:
        """Drop every cached result and mark the affected files outdated.

        Files that no longer exist are cleared and forgotten instead.

        Returns:
            Number of paths marked outdated.
        """
        known = await self._results.all_known_paths()
        # Results shown without a stored association, e.g. older state files
        extra = [
            path
            for path, record in self._tracker.snapshot().items()
            if record.status in RESULT_STATUSES and path not in known
        ]

        outdated = 0
        for path in list(dict.fromkeys(known + extra)):
            if not os.path.exists(path):
                await self._results.clear_by_known_path(path)
                self._tracker.remove_file(path)
                continue
            await self._results.invalidate(path)
            self._tracker.mark_outdated(path)
            outdated += 1

        logger.info("Filter change invalidated %d file(s)", outdated)
        self._invalidated.emit(outdated)
        return outdated

    # --- Internals ---

    def _require(self, key: str) -> FilterSmellConfig:
        try:
            return self._config.smells[key]
        except KeyError:
            raise KeyError(f"Unknown smell {key!r}") from None

    async def _confirm_change(self) -> bool:
        if self._config.suppress_invalidation_warning or self._confirm is None:
            return True
        choice = await self._confirm(CONFIRM_MESSAGE)
        if choice == "dont_remind":
            self._config.suppress_invalidation_warning = True
            self._config_store.save(self._config)
            return True
        return choice == "yes"

    async def _commit(self) -> None:
        self._config_store.save(self._config)
        await self.invalidate_all()
