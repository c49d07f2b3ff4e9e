# tests/unit/cache/test_unit_hashing.py - v1
"""Tests for cache/hashing.py."""

from __future__ import annotations

import hashlib
import os
from pathlib import Path

import pytest

from smelltrack.cache.hashing import (
    SMELL_ID_LENGTH,
    ContentReadError,
    compute_content_hash,
    hash_file,
    is_within,
    normalize_path,
    read_content,
    smell_digest,
    workspace_namespace,
)


class TestContentHash:
    def test_sha256_hex(self):
        assert compute_content_hash(b"abc") == hashlib.sha256(b"abc").hexdigest()

    def test_exact_bytes_matter(self):
        assert compute_content_hash(b"x = 1\n") != compute_content_hash(b"x = 1\r\n")

    def test_hash_file_matches_bytes(self, tmp_path: Path):
        f = tmp_path / "m.py"
        f.write_bytes(b"print('hi')\n")
        assert hash_file(f) == compute_content_hash(b"print('hi')\n")

    def test_missing_file_raises_content_read_error(self, tmp_path: Path):
        with pytest.raises(ContentReadError) as exc_info:
            read_content(tmp_path / "nope.py")
        assert exc_info.value.path.endswith("nope.py")
        assert isinstance(exc_info.value, OSError)

    def test_directory_is_unreadable(self, tmp_path: Path):
        with pytest.raises(ContentReadError):
            hash_file(tmp_path)


class TestSmellDigest:
    def test_length_and_determinism(self):
        payload = {"symbol": "no-self-use", "occurrences": [{"line": 1, "column": 0}]}
        digest = smell_digest(payload)
        assert len(digest) == SMELL_ID_LENGTH
        assert digest == smell_digest(dict(reversed(list(payload.items()))))

    def test_id_field_ignored(self):
        payload = {"symbol": "no-self-use"}
        assert smell_digest(payload) == smell_digest({**payload, "id": "deadbeef"})

    def test_content_changes_digest(self):
        assert smell_digest({"line": 1}) != smell_digest({"line": 2})


class TestPaths:
    def test_normalize_is_absolute(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert normalize_path("a.py") == os.path.normcase(str(tmp_path / "a.py"))

    def test_normalize_collapses_dots(self, tmp_path: Path):
        assert normalize_path(tmp_path / "x" / ".." / "a.py") == normalize_path(tmp_path / "a.py")

    def test_is_within(self, tmp_path: Path):
        root = tmp_path / "ws"
        assert is_within(root / "pkg" / "m.py", root)
        assert is_within(root, root)

    def test_sibling_prefix_is_not_within(self, tmp_path: Path):
        assert not is_within(tmp_path / "ws2" / "m.py", tmp_path / "ws")

    def test_namespace(self, tmp_path: Path):
        assert workspace_namespace(None) == "default"
        ns = workspace_namespace(tmp_path)
        assert len(ns) == 16
        assert ns == workspace_namespace(str(tmp_path))
        assert ns != workspace_namespace(tmp_path / "other")
