# src/analysis/base_client.py - v1
"""Abstract analysis backend interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from smelltrack.analysis.models import DetectionResult


class BaseAnalysisClient(ABC):
    """Remote smell detector. Implementations never write to the cache."""

    @abstractmethod
    async def detect(
        self, path: str, enabled_smells: dict[str, dict[str, Any]]
    ) -> DetectionResult:
        """Run detection for one file.

        Raises:
            AnalysisFailure: When the call could not complete at all.
        """

    @abstractmethod
    async def is_reachable(self) -> bool:
        """Liveness probe. Must not raise."""

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Identifier used in logs."""

    async def close(self) -> None:
        """Release resources. Default is a no-op."""
