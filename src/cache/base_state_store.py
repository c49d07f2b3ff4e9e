# src/cache/base_state_store.py - v1
"""Abstract bucketed key-value store backing the result cache.

Values are JSON-compatible (lists, dicts, strings). A store instance is bound
to one workspace namespace at construction time.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class BaseStateStore(ABC):
    """Unified interface for persistent state backends."""

    @abstractmethod
    async def get(self, bucket: str, key: str) -> Any | None:
        """Retrieve a value, or None when the key is absent."""

    @abstractmethod
    async def put(self, bucket: str, key: str, value: Any) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    async def delete(self, bucket: str, key: str) -> None:
        """Remove a key. Missing keys are ignored."""

    @abstractmethod
    async def items(self, bucket: str) -> dict[str, Any]:
        """Return a copy of every key/value pair in a bucket."""

    @abstractmethod
    async def clear(self, *buckets: str) -> None:
        """Empty the given buckets in a single operation."""

    def close(self) -> None:
        """Release backend resources. No-op by default."""
