# src/analysis/models.py - v1
"""Analysis backend contract models and errors."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from smelltrack.core.models import Smell


class ServerState(str, Enum):
    UNKNOWN = "unknown"
    UP = "up"
    DOWN = "down"


class DetectionResult(BaseModel):
    """Outcome of one remote detection call.

    Failure is carried by ``status_code`` alone. An empty ``findings`` list
    with a 2xx status means the file is clean.
    """

    findings: list[Smell] = Field(default_factory=list)
    status_code: int

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class AnalysisFailure(Exception):
    """Remote detection returned a non-success status or could not complete."""

    def __init__(self, path: str, reason: str, status_code: int | None = None):
        self.path = path
        self.reason = reason
        self.status_code = status_code
        suffix = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"Detection failed for {path}{suffix}: {reason}")


class Unavailable(Exception):
    """Backend is down and no cached result exists for the file."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Analysis backend unavailable, no cached result for {path}")
