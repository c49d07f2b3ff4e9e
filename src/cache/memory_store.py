# src/cache/memory_store.py - v1
"""In-process state store (CACHE_BACKEND=memory).

Nothing survives the process. Useful for one-shot CLI runs and tests.
"""

from __future__ import annotations

import copy
from typing import Any

from smelltrack.cache.base_state_store import BaseStateStore


class MemoryStateStore(BaseStateStore):
    """Dict-backed state store."""

    def __init__(self, namespace: str = "default") -> None:
        self._namespace = namespace
        self._data: dict[str, dict[str, Any]] = {}

    async def get(self, bucket: str, key: str) -> Any | None:
        value = self._data.get(bucket, {}).get(key)
        return copy.deepcopy(value)

    async def put(self, bucket: str, key: str, value: Any) -> None:
        self._data.setdefault(bucket, {})[key] = copy.deepcopy(value)

    async def delete(self, bucket: str, key: str) -> None:
        self._data.get(bucket, {}).pop(key, None)

    async def items(self, bucket: str) -> dict[str, Any]:
        return copy.deepcopy(self._data.get(bucket, {}))

    async def clear(self, *buckets: str) -> None:
        for bucket in buckets:
            self._data.pop(bucket, None)
