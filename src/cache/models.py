# src/cache/models.py - v3
"""Persisted cache layout and change notification types.

Two buckets live side by side in the state store, namespaced per workspace:

- ``smell_cache``: content hash -> list of serialized smells
- ``hash_path_map``: content hash -> paths holding that content, most recent
  writer first
"""

from __future__ import annotations

from typing import Final

from pydantic import BaseModel

SMELL_CACHE: Final = "smell_cache"
HASH_PATH_MAP: Final = "hash_path_map"
CACHE_BUCKETS: Final = (SMELL_CACHE, HASH_PATH_MAP)

# Notification target meaning "every cached path changed".
ALL_PATHS: Final = "all"


class CacheStats(BaseModel):
    """Snapshot of the persisted cache size."""

    entries: int
    known_paths: int
    associations: int
