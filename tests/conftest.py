# tests/conftest.py - v2
"""Shared test fixtures for all unit and integration tests.

Provides sample smells, a small on-disk workspace, in-memory stores and a
scripted analysis client. No external services: HTTP and Redis are mocked.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from smelltrack.analysis.base_client import BaseAnalysisClient
from smelltrack.analysis.models import AnalysisFailure, DetectionResult
from smelltrack.analysis.server_status import ServerStatusMonitor
from smelltrack.cache.memory_store import MemoryStateStore
from smelltrack.cache.result_store import ResultStore
from smelltrack.config.settings import Settings
from smelltrack.core.models import Smell
from smelltrack.filters.config_store import FilterConfigStore
from smelltrack.filters.coordinator import FilterInvalidationCoordinator
from smelltrack.tracking.status_tracker import StatusTracker


class ScriptedAnalysisClient(BaseAnalysisClient):
    """In-process analysis backend with canned answers.

    ``findings`` maps a file name to the raw smells returned for it; files
    not listed come back clean.
    """

    def __init__(self) -> None:
        self.findings: dict[str, list[dict[str, Any]]] = {}
        self.status_code = 200
        self.reachable = True
        self.raise_failure = False
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.on_detect = None

    async def detect(self, path: str, enabled_smells: dict[str, dict[str, Any]]) -> DetectionResult:
        self.calls.append((path, enabled_smells))
        if self.on_detect is not None:
            self.on_detect(path)
        if self.raise_failure:
            raise AnalysisFailure(path, "connection refused")
        if self.status_code >= 300:
            return DetectionResult(findings=[], status_code=self.status_code)
        raw = self.findings.get(Path(path).name, [])
        return DetectionResult(
            findings=[Smell.model_validate(item) for item in raw],
            status_code=self.status_code,
        )

    async def is_reachable(self) -> bool:
        return self.reachable

    @property
    def backend_name(self) -> str:
        return "scripted"


def make_smell_payload(path: str = "/ws/a.py", line: int = 3, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "type": "refactor",
        "symbol": "too-many-arguments",
        "message": "Too many arguments (8/6)",
        "messageId": "R0913",
        "confidence": "UNDEFINED",
        "path": path,
        "module": Path(path).stem,
        "obj": "compute",
        "occurences": [{"line": line, "column": 0, "endLine": line, "endColumn": 20}],
        "additionalInfo": {},
    }
    payload.update(overrides)
    return payload


# === FIXTURES: Sample data ===


@pytest.fixture
def smell_payload() -> dict[str, Any]:
    """Raw smell as the analysis backend returns it (camelCase, legacy key)."""
    return make_smell_payload()


@pytest.fixture
def smell_factory():
    """Build raw smell payloads with overrides."""
    return make_smell_payload


@pytest.fixture
def sample_smell(smell_payload: dict[str, Any]) -> Smell:
    return Smell.model_validate(smell_payload)


@pytest.fixture
def second_smell() -> Smell:
    return Smell.model_validate(
        make_smell_payload(
            symbol="use-a-generator",
            messageId="R1729",
            message="Use a generator instead of 'any(...)'",
            line=12,
        )
    )


# === FIXTURES: Workspace ===


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Workspace with two Python files and one ignored directory."""
    root = tmp_path / "ws"
    (root / "pkg").mkdir(parents=True)
    (root / ".venv").mkdir()
    (root / "a.py").write_text("def a(x, y):\n    return x + y\n", encoding="utf-8")
    (root / "pkg" / "b.py").write_text("import os\n\nprint(os.sep)\n", encoding="utf-8")
    (root / ".venv" / "site.py").write_text("x = 1\n", encoding="utf-8")
    (root / "README.md").write_text("# ws\n", encoding="utf-8")
    return root


# === FIXTURES: Components ===


@pytest.fixture
def memory_store() -> MemoryStateStore:
    return MemoryStateStore(namespace="test")


@pytest.fixture
def result_store(memory_store: MemoryStateStore) -> ResultStore:
    return ResultStore(memory_store)


@pytest.fixture
def tracker() -> StatusTracker:
    return StatusTracker()


@pytest.fixture
def scripted_client() -> ScriptedAnalysisClient:
    return ScriptedAnalysisClient()


@pytest.fixture
def server_status(scripted_client: ScriptedAnalysisClient) -> ServerStatusMonitor:
    return ServerStatusMonitor(scripted_client, interval_s=0.05)


@pytest.fixture
def filter_store(tmp_path: Path) -> FilterConfigStore:
    return FilterConfigStore(tmp_path / "config" / "smells.json")


@pytest.fixture
def coordinator(
    filter_store: FilterConfigStore, result_store: ResultStore, tracker: StatusTracker
) -> FilterInvalidationCoordinator:
    return FilterInvalidationCoordinator(filter_store, result_store, tracker)


@pytest.fixture
def settings(tmp_path: Path, workspace: Path) -> Settings:
    """Settings bound to the sample workspace with in-memory persistence."""
    return Settings(
        _env_file=None,
        workspace_root=workspace,
        cache_backend="memory",
        cache_root=tmp_path / "cache",
        filter_config_path=tmp_path / "config" / "smells.json",
        watch_interval_s=0.05,
        health_poll_interval_s=0.05,
    )
