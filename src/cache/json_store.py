# src/cache/json_store.py - v3
"""JSON file-based state store (default CACHE_BACKEND=json).

One JSON document per workspace namespace under CACHE_ROOT, holding every
bucket. The document is kept in memory and rewritten through a temporary file
and ``os.replace`` on each mutation, so readers never observe a half-written
file. A mutation is applied to a copy of the document and only adopted once
that copy is on disk, so a failed write leaves memory and file in agreement.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from smelltrack.cache.base_state_store import BaseStateStore

logger = logging.getLogger(__name__)


class JsonStateStore(BaseStateStore):
    """File-backed state store using a single JSON document per namespace."""

    def __init__(self, cache_root: Path | str, namespace: str = "default") -> None:
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)
        self._namespace = namespace
        self._data: dict[str, dict[str, Any]] = self._load()

    @property
    def path(self) -> Path:
        safe = self._namespace.replace("/", "_").replace("\\", "_")
        return self._root / f"{safe}.json"

    async def get(self, bucket: str, key: str) -> Any | None:
        return self._data.get(bucket, {}).get(key)

    async def put(self, bucket: str, key: str, value: Any) -> None:
        data = self._copy()
        data.setdefault(bucket, {})[key] = value
        self._commit(data)

    async def delete(self, bucket: str, key: str) -> None:
        if key not in self._data.get(bucket, {}):
            return
        data = self._copy()
        del data[bucket][key]
        self._commit(data)

    async def items(self, bucket: str) -> dict[str, Any]:
        return dict(self._data.get(bucket, {}))

    async def clear(self, *buckets: str) -> None:
        data = self._copy()
        for bucket in buckets:
            data.pop(bucket, None)
        self._commit(data)

    def _load(self) -> dict[str, dict[str, Any]]:
        path = self.path
        if not path.exists():
            return {}
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to read state file %s, starting empty: %s", path, e)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring malformed state file %s", path)
            return {}
        return {k: dict(v) for k, v in raw.items() if isinstance(v, dict)}

    def _copy(self) -> dict[str, dict[str, Any]]:
        return {bucket: dict(table) for bucket, table in self._data.items()}

    def _commit(self, data: dict[str, dict[str, Any]]) -> None:
        """Write ``data`` to disk, then make it the in-memory document.

        Raises:
            OSError: If the file cannot be written. Memory is left unchanged.
        """
        path = self.path
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.replace(tmp, path)
        self._data = data
