# src/cache/hashing.py - v1
"""Content fingerprinting helpers.

The content hash is the cache key: SHA-256 over the exact bytes of a file at
the moment it is analyzed. Everything here is a pure function of its inputs
except ``read_content``, which touches the filesystem.
"""

from __future__ import annotations

import hashlib
import json
import os
from pathlib import Path
from typing import Any

SMELL_ID_LENGTH = 8


class ContentReadError(OSError):
    """Raised when a file cannot be read for hashing (locked, deleted, ...)."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}")


def compute_content_hash(data: bytes) -> str:
    """SHA-256 hex digest of raw content."""
    return hashlib.sha256(data).hexdigest()


def read_content(path: str | Path) -> bytes:
    """Read a file's bytes, converting OS failures into ContentReadError."""
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise ContentReadError(str(path), e.strerror or type(e).__name__) from e


def hash_file(path: str | Path) -> str:
    """Hash the current content of ``path``.

    Raises:
        ContentReadError: If the file cannot be read.
    """
    return compute_content_hash(read_content(path))


def smell_digest(payload: dict[str, Any]) -> str:
    """Short deterministic digest of a serialized smell.

    The ``id`` key is excluded so that re-decorating an already decorated
    smell yields the same value.
    """
    body = {k: v for k, v in payload.items() if k != "id"}
    canonical = json.dumps(body, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:SMELL_ID_LENGTH]


def normalize_path(path: str | Path) -> str:
    """Absolute, case-normalized path used as the key for status and bookkeeping."""
    return os.path.normcase(os.path.abspath(os.fspath(path)))


def workspace_namespace(root: str | Path | None) -> str:
    """Stable per-workspace namespace for persisted state."""
    if root is None:
        return "default"
    digest = hashlib.sha1(normalize_path(root).encode("utf-8")).hexdigest()  # noqa: S324
    return digest[:16]


def is_within(path: str | Path, root: str | Path) -> bool:
    """True if ``path`` lies inside ``root`` (or is ``root`` itself)."""
    return Path(normalize_path(path)).is_relative_to(Path(normalize_path(root)))
