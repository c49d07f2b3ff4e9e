# tests/unit/cache/test_unit_state_stores.py - v2
"""Tests for the JSON, SQLite and in-memory state stores."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from smelltrack.cache.json_store import JsonStateStore
from smelltrack.cache.memory_store import MemoryStateStore
from smelltrack.cache.sqlite_store import SqliteStateStore


@pytest.fixture(params=["json", "sqlite", "memory"])
def store(request, tmp_path: Path):
    if request.param == "json":
        s = JsonStateStore(cache_root=tmp_path / "cache", namespace="ns1")
    elif request.param == "sqlite":
        s = SqliteStateStore(db_path=tmp_path / "state.db", namespace="ns1")
    else:
        s = MemoryStateStore(namespace="ns1")
    yield s
    s.close()


class TestStateStoreContract:
    @pytest.mark.asyncio
    async def test_put_and_get(self, store):
        await store.put("bucket", "k", [{"a": 1}])
        assert await store.get("bucket", "k") == [{"a": 1}]

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        assert await store.get("bucket", "missing") is None

    @pytest.mark.asyncio
    async def test_put_replaces(self, store):
        await store.put("bucket", "k", "v1")
        await store.put("bucket", "k", "v2")
        assert await store.get("bucket", "k") == "v2"

    @pytest.mark.asyncio
    async def test_empty_list_is_a_value(self, store):
        await store.put("bucket", "k", [])
        assert await store.get("bucket", "k") == []

    @pytest.mark.asyncio
    async def test_delete(self, store):
        await store.put("bucket", "k", 1)
        await store.delete("bucket", "k")
        await store.delete("bucket", "k")
        assert await store.get("bucket", "k") is None

    @pytest.mark.asyncio
    async def test_buckets_are_independent(self, store):
        await store.put("b1", "k", "one")
        await store.put("b2", "k", "two")
        assert await store.get("b1", "k") == "one"
        assert await store.items("b2") == {"k": "two"}

    @pytest.mark.asyncio
    async def test_clear_selected_buckets(self, store):
        await store.put("b1", "k", 1)
        await store.put("b2", "k", 2)
        await store.put("b3", "k", 3)
        await store.clear("b1", "b2")
        assert await store.items("b1") == {}
        assert await store.items("b2") == {}
        assert await store.items("b3") == {"k": 3}


class TestJsonStateStore:
    @pytest.mark.asyncio
    async def test_survives_reopen(self, tmp_path: Path):
        s1 = JsonStateStore(cache_root=tmp_path, namespace="ws")
        await s1.put("smell_cache", "h1", [])
        s2 = JsonStateStore(cache_root=tmp_path, namespace="ws")
        assert await s2.get("smell_cache", "h1") == []

    @pytest.mark.asyncio
    async def test_namespaces_use_separate_files(self, tmp_path: Path):
        a = JsonStateStore(cache_root=tmp_path, namespace="a")
        b = JsonStateStore(cache_root=tmp_path, namespace="b")
        await a.put("bucket", "k", 1)
        assert await b.get("bucket", "k") is None
        assert a.path != b.path

    @pytest.mark.asyncio
    async def test_corrupt_file_starts_empty(self, tmp_path: Path):
        (tmp_path / "ws.json").write_text("{not json", encoding="utf-8")
        store = JsonStateStore(cache_root=tmp_path, namespace="ws")
        assert await store.items("smell_cache") == {}

    @pytest.mark.asyncio
    async def test_no_temp_file_left(self, tmp_path: Path):
        store = JsonStateStore(cache_root=tmp_path, namespace="ws")
        await store.put("bucket", "k", 1)
        assert [p.name for p in tmp_path.iterdir()] == ["ws.json"]
        assert json.loads(store.path.read_text(encoding="utf-8")) == {"bucket": {"k": 1}}

    @pytest.mark.asyncio
    async def test_failed_write_leaves_memory_unchanged(self, tmp_path: Path):
        store = JsonStateStore(cache_root=tmp_path, namespace="ws")
        await store.put("bucket", "k", 1)
        with patch("smelltrack.cache.json_store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                await store.put("bucket", "k", 2)
            with pytest.raises(OSError):
                await store.delete("bucket", "k")
            with pytest.raises(OSError):
                await store.clear("bucket")
        assert await store.get("bucket", "k") == 1
        assert json.loads(store.path.read_text(encoding="utf-8")) == {"bucket": {"k": 1}}


class TestSqliteStateStore:
    @pytest.mark.asyncio
    async def test_namespaces_share_database(self, tmp_path: Path):
        db = tmp_path / "state.db"
        a = SqliteStateStore(db_path=db, namespace="a")
        b = SqliteStateStore(db_path=db, namespace="b")
        await a.put("bucket", "k", "from-a")
        await b.put("bucket", "k", "from-b")
        await a.clear("bucket")
        assert await a.get("bucket", "k") is None
        assert await b.get("bucket", "k") == "from-b"
        a.close()
        b.close()

    @pytest.mark.asyncio
    async def test_survives_reopen(self, tmp_path: Path):
        db = tmp_path / "state.db"
        s1 = SqliteStateStore(db_path=db, namespace="ws")
        await s1.put("hash_path_map", "h1", "/ws/a.py")
        s1.close()
        s2 = SqliteStateStore(db_path=db, namespace="ws")
        assert await s2.items("hash_path_map") == {"h1": "/ws/a.py"}
        s2.close()


class TestMemoryStateStore:
    @pytest.mark.asyncio
    async def test_returns_copies(self):
        store = MemoryStateStore()
        await store.put("bucket", "k", [{"a": 1}])
        value = await store.get("bucket", "k")
        value.append({"b": 2})
        assert await store.get("bucket", "k") == [{"a": 1}]
