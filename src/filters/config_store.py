# src/filters/config_store.py - v1
"""JSON persistence for the filter configuration."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import ValidationError

from smelltrack.filters.catalog import default_configuration
from smelltrack.filters.models import FilterConfiguration

logger = logging.getLogger(__name__)


class FilterConfigStore:
    """Reads and writes ``FilterConfiguration`` as one JSON file.

    A missing file yields the default catalogue. An unreadable one is logged
    and replaced by defaults on the next save.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> FilterConfiguration:
        if not self._path.exists():
            return default_configuration()
        try:
            return FilterConfiguration.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, ValidationError, ValueError) as e:
            logger.warning("Ignoring unreadable filter config %s: %s", self._path, e)
            return default_configuration()

    def save(self, configuration: FilterConfiguration) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(configuration.model_dump_json(indent=2), encoding="utf-8")
        os.replace(tmp, self._path)
        logger.debug("Saved filter config to %s", self._path)
