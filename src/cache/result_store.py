# src/cache/result_store.py - v2
"""Content-addressable result store.

Maps the SHA-256 of a file's content to the smells found in that exact
content, plus a bookkeeping map from content hash to every path that content
was seen at. Entries are written whole and never merged.

Several files can share one content hash (empty ``__init__.py`` files are the
common case). The association is an ordered path list: the first path is the
most recent writer and answers ``path_for_hash``. An entry is only dropped by
path-based clearing once no other path is associated with it.

All reads and writes of the ``smell_cache`` and ``hash_path_map`` buckets go
through this class. Other components must not touch those buckets directly.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Sequence

from pydantic import ValidationError

from smelltrack.cache.base_state_store import BaseStateStore
from smelltrack.cache.hashing import (
    ContentReadError,
    hash_file,
    normalize_path,
    smell_digest,
)
from smelltrack.cache.models import (
    ALL_PATHS,
    CACHE_BUCKETS,
    HASH_PATH_MAP,
    SMELL_CACHE,
    CacheStats,
)
from smelltrack.core.events import Subscribers, Unsubscribe
from smelltrack.core.models import Smell

logger = logging.getLogger(__name__)


def decorate_smells(smells: Sequence[Smell | dict[str, Any]]) -> list[Smell]:
    """Validate raw smells and stamp each with its content-derived id."""
    decorated: list[Smell] = []
    for raw in smells:
        smell = raw if isinstance(raw, Smell) else Smell.model_validate(raw)
        decorated.append(smell.model_copy(update={"id": smell_digest(smell.to_wire())}))
    return decorated


def _as_paths(value: Any) -> list[str]:
    # Single-path strings are what older state files hold
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [p for p in value if isinstance(p, str)]


class ResultStore:
    """Content-hash keyed cache of smell results with path bookkeeping."""

    def __init__(self, state_store: BaseStateStore) -> None:
        self._state = state_store
        self._changes: Subscribers[str] = Subscribers("result-store")

    def subscribe(self, callback: Callable[[str], None]) -> Unsubscribe:
        """Receive the normalized path (or ``ALL_PATHS``) after each mutation."""
        return self._changes.subscribe(callback)

    # --- Bookkeeping internals ---

    async def _paths(self, content_hash: str) -> list[str]:
        return _as_paths(await self._state.get(HASH_PATH_MAP, content_hash))

    async def _write_paths(self, content_hash: str, paths: list[str]) -> None:
        if paths:
            await self._state.put(HASH_PATH_MAP, content_hash, paths)
        else:
            await self._state.delete(HASH_PATH_MAP, content_hash)

    async def _mapping(self) -> dict[str, list[str]]:
        raw = await self._state.items(HASH_PATH_MAP)
        return {digest: _as_paths(value) for digest, value in raw.items()}

    # --- Writes ---

    async def set(
        self,
        path: str | Path,
        smells: Sequence[Smell | dict[str, Any]],
        content_hash: str | None = None,
    ) -> list[Smell]:
        """Store the complete result set for the content of ``path``.

        Args:
            path: File the smells were detected in.
            smells: Full result set. An empty sequence records "analyzed, clean".
            content_hash: Hash captured before analysis started. When omitted
                the file is hashed now.

        Returns:
            The stored smells, decorated with ids.

        Raises:
            ContentReadError: If no hash was given and the file is unreadable.
        """
        key = normalize_path(path)
        digest = content_hash or hash_file(key)
        decorated = decorate_smells(smells)

        await self._state.put(SMELL_CACHE, digest, [s.to_wire() for s in decorated])
        paths = await self._paths(digest)
        if paths and paths[0] != key:
            logger.debug("Hash %s now led by %s (was %s)", digest[:12], key, paths[0])
        await self._write_paths(digest, [key, *(p for p in paths if p != key)])

        logger.debug("Cached %d smells for %s (%s)", len(decorated), key, digest[:12])
        self._changes.emit(key)
        return decorated

    async def associate(self, content_hash: str, path: str | Path) -> bool:
        """Record that ``path`` currently holds already-cached content.

        The path joins the end of the hash's path list, so it survives a
        restart without taking precedence over the writer.

        Returns:
            True if the path was not associated with the hash before.
        """
        key = normalize_path(path)
        paths = await self._paths(content_hash)
        if key in paths:
            return False
        await self._write_paths(content_hash, [*paths, key])
        logger.debug("Associated %s with shared hash %s", key, content_hash[:12])
        self._changes.emit(key)
        return True

    async def clear_for_path(self, path: str | Path) -> list[str]:
        """Drop the entry for the current content of ``path``.

        ``path`` loses its association with that hash. Other paths holding the
        same content stay associated but lose their result with it.

        Returns:
            The other paths whose result was dropped.

        Raises:
            ContentReadError: If the file cannot be read.
        """
        key = normalize_path(path)
        digest = hash_file(key)
        others = [p for p in await self._paths(digest) if p != key]
        await self._state.delete(SMELL_CACHE, digest)
        await self._write_paths(digest, others)
        if others:
            logger.info(
                "Cleared shared entry %s for %s, %d other path(s) affected",
                digest[:12], key, len(others),
            )
        else:
            logger.debug("Cleared cache for %s (%s)", key, digest[:12])
        self._changes.emit(key)
        for other in others:
            self._changes.emit(other)
        return others

    async def clear_by_known_path(self, path: str | Path) -> bool:
        """Remove ``path`` from every association.

        Works without reading the file, so it is the primitive used when the
        file has been deleted. Entries still associated with another path are
        kept for that path.

        Returns:
            True if at least one association was found and removed.
        """
        key = normalize_path(path)
        removed = 0
        for digest, paths in (await self._mapping()).items():
            if key not in paths:
                continue
            remaining = [p for p in paths if p != key]
            if remaining:
                logger.debug("Entry %s stays with %s", digest[:12], remaining[0])
            else:
                await self._state.delete(SMELL_CACHE, digest)
            await self._write_paths(digest, remaining)
            removed += 1
        if removed:
            logger.debug("Cleared %d cache associations for known path %s", removed, key)
            self._changes.emit(key)
        return bool(removed)

    async def clear_all(self) -> None:
        """Wipe both buckets in one backend operation."""
        await self._state.clear(*CACHE_BUCKETS)
        logger.info("Cleared all cached smells")
        self._changes.emit(ALL_PATHS)

    async def invalidate(self, path: str | Path) -> int:
        """Drop every result entry related to ``path`` but keep its associations.

        The path stays enumerable through ``all_known_paths`` so callers can
        keep reporting it as outdated. The current content hash is included
        when the file is readable.

        Returns:
            Number of result entries removed.
        """
        key = normalize_path(path)
        hashes = set(await self.hashes_for_path(key))
        try:
            hashes.add(hash_file(key))
        except ContentReadError:
            logger.debug("Invalidating %s without current hash (unreadable)", key)

        removed = 0
        for digest in hashes:
            if await self._state.get(SMELL_CACHE, digest) is not None:
                await self._state.delete(SMELL_CACHE, digest)
                removed += 1
        self._changes.emit(key)
        return removed

    async def reassociate(
        self,
        content_hash: str,
        new_path: str | Path,
        replaces: str | Path | None = None,
    ) -> str | None:
        """Move an existing hash to a different path. Never touches results.

        ``new_path`` takes precedence for the hash. The path it replaces
        (``replaces``, or the previous first path) is no longer associated.

        Returns:
            The path that previously came first for the hash, if any.
        """
        key = normalize_path(new_path)
        paths = await self._paths(content_hash)
        previous = paths[0] if paths else None
        dropped = normalize_path(replaces) if replaces is not None else previous
        if previous == key and dropped in (None, key):
            return previous
        await self._write_paths(
            content_hash, [key, *(p for p in paths if p not in (key, dropped))]
        )
        if dropped and dropped != key:
            logger.info("Reassociated %s: %s -> %s", content_hash[:12], dropped, key)
            self._changes.emit(dropped)
        self._changes.emit(key)
        return previous

    async def prune_orphans(self, path: str | Path) -> int:
        """Remove ``path`` from hashes of its superseded versions.

        Entries nobody else holds are deleted with it. Afterwards the path is
        associated with its current hash, so it stays tracked even when that
        hash has no result yet.

        Returns:
            Number of orphaned hashes the path was removed from.

        Raises:
            ContentReadError: If the file cannot be read.
        """
        key = normalize_path(path)
        current = hash_file(key)
        mapping = await self._mapping()
        orphans = [h for h, paths in mapping.items() if key in paths and h != current]
        for digest in orphans:
            remaining = [p for p in mapping[digest] if p != key]
            if not remaining:
                await self._state.delete(SMELL_CACHE, digest)
            await self._write_paths(digest, remaining)
        current_paths = mapping.get(current, [])
        if orphans and key not in current_paths:
            await self._write_paths(current, [*current_paths, key])
        if orphans:
            logger.debug("Pruned %d orphaned entries for %s", len(orphans), key)
        return len(orphans)

    # --- Reads ---

    async def get(self, path: str | Path) -> list[Smell] | None:
        """Cached smells for the current content of ``path``, or None.

        Raises:
            ContentReadError: If the file cannot be read.
        """
        return await self.get_by_hash(hash_file(normalize_path(path)))

    async def get_by_hash(self, content_hash: str) -> list[Smell] | None:
        raw = await self._state.get(SMELL_CACHE, content_hash)
        if raw is None:
            return None
        try:
            return [Smell.model_validate(item) for item in raw]
        except (ValidationError, TypeError) as e:
            logger.warning("Discarding unreadable cache entry %s: %s", content_hash[:12], e)
            return None

    async def has(self, path: str | Path) -> bool:
        return await self.get(path) is not None

    async def has_hash(self, content_hash: str) -> bool:
        return await self._state.get(SMELL_CACHE, content_hash) is not None

    async def path_for_hash(self, content_hash: str) -> str | None:
        """The path with precedence for ``content_hash``."""
        paths = await self._paths(content_hash)
        return paths[0] if paths else None

    async def paths_for_hash(self, content_hash: str) -> list[str]:
        return await self._paths(content_hash)

    async def hashes_for_path(self, path: str | Path) -> list[str]:
        key = normalize_path(path)
        return [digest for digest, paths in (await self._mapping()).items() if key in paths]

    async def all_known_paths(self) -> list[str]:
        """Distinct paths present in the association map, in insertion order."""
        mapping = await self._mapping()
        return list(dict.fromkeys(p for paths in mapping.values() for p in paths))

    async def is_tracked(self, path: str | Path) -> bool:
        return normalize_path(path) in await self.all_known_paths()

    async def stats(self) -> CacheStats:
        entries = await self._state.items(SMELL_CACHE)
        mapping = await self._mapping()
        return CacheStats(
            entries=len(entries),
            known_paths=len({p for paths in mapping.values() for p in paths}),
            associations=sum(len(paths) for paths in mapping.values()),
        )
