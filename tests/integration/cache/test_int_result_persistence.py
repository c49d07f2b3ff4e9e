# tests/integration/cache/test_int_result_persistence.py - v1
"""Integration tests for ResultStore over the file-backed state stores.

No external services required.
Coverage targets: result_store.py, json_store.py, sqlite_store.py, cache_factory.py
"""

from __future__ import annotations

from pathlib import Path

import pytest

from smelltrack.cache.cache_factory import create_state_store
from smelltrack.cache.hashing import normalize_path, workspace_namespace
from smelltrack.cache.result_store import ResultStore
from smelltrack.config.settings import Settings

pytestmark = pytest.mark.integration


def _settings(tmp_path: Path, backend: str) -> Settings:
    return Settings(_env_file=None, cache_backend=backend, cache_root=tmp_path / "cache")


@pytest.mark.parametrize("backend", ["json", "sqlite"])
class TestResultStoreSurvivesReopen:

    @pytest.mark.asyncio
    async def test_entries_and_associations(self, backend, tmp_path, workspace, sample_smell):
        ns = workspace_namespace(workspace)
        first = create_state_store(_settings(tmp_path, backend), namespace=ns)
        stored = await ResultStore(first).set(workspace / "a.py", [sample_smell])
        await ResultStore(first).set(workspace / "pkg" / "b.py", [])
        first.close()

        second = create_state_store(_settings(tmp_path, backend), namespace=ns)
        results = ResultStore(second)
        try:
            assert await results.get(workspace / "a.py") == stored
            assert await results.get(workspace / "pkg" / "b.py") == []
            assert await results.all_known_paths() == [
                normalize_path(workspace / "a.py"),
                normalize_path(workspace / "pkg" / "b.py"),
            ]
        finally:
            second.close()

    @pytest.mark.asyncio
    async def test_namespaces_are_isolated(self, backend, tmp_path, workspace):
        settings = _settings(tmp_path, backend)
        one = create_state_store(settings, namespace="one")
        two = create_state_store(settings, namespace="two")
        try:
            await ResultStore(one).set(workspace / "a.py", [])
            assert await ResultStore(two).all_known_paths() == []
        finally:
            one.close()
            two.close()

    @pytest.mark.asyncio
    async def test_clear_all_persists(self, backend, tmp_path, workspace):
        settings = _settings(tmp_path, backend)
        store = create_state_store(settings, namespace="ws")
        await ResultStore(store).set(workspace / "a.py", [])
        await ResultStore(store).clear_all()
        store.close()

        reopened = create_state_store(settings, namespace="ws")
        try:
            assert (await ResultStore(reopened).stats()).entries == 0
        finally:
            reopened.close()
