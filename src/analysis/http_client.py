# src/analysis/http_client.py - v1
"""HTTP client for the smell analysis backend.

Endpoints:
    POST /smells  {"file_path": str, "enabled_smells": {key: options}}
    GET  /health
"""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx
from pydantic import ValidationError

from smelltrack.analysis.base_client import BaseAnalysisClient
from smelltrack.analysis.models import AnalysisFailure, DetectionResult
from smelltrack.core.models import Smell

logger = logging.getLogger(__name__)

_HEALTH_TIMEOUT_S = 5.0


class HttpAnalysisClient(BaseAnalysisClient):
    """Talks to the analysis backend over HTTP with httpx."""

    def __init__(self, base_url: str, timeout_s: float = 120.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_s
        logger.debug("Analysis client base_url=%s", self._base_url)

    @property
    def backend_name(self) -> str:
        return self._base_url

    async def detect(
        self, path: str, enabled_smells: dict[str, dict[str, Any]]
    ) -> DetectionResult:
        name = os.path.basename(path)
        logger.info("Starting smell detection for %s", name)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                r = await client.post(
                    f"{self._base_url}/smells",
                    json={"file_path": path, "enabled_smells": enabled_smells},
                    headers={"Content-Type": "application/json"},
                )
        except httpx.HTTPError as e:
            raise AnalysisFailure(path, f"{type(e).__name__}: {e}") from e

        if not r.is_success:
            logger.error("Backend request failed for %s (%d): %s", name, r.status_code, r.text[:500])
            return DetectionResult(findings=[], status_code=r.status_code)

        try:
            payload = r.json()
            findings = [Smell.model_validate(item) for item in payload]
        except (ValueError, TypeError, ValidationError) as e:
            raise AnalysisFailure(path, f"invalid response body: {e}", r.status_code) from e

        logger.info("Detected %d smells in %s", len(findings), name)
        return DetectionResult(findings=findings, status_code=r.status_code)

    async def is_reachable(self) -> bool:
        try:
            async with httpx.AsyncClient(timeout=_HEALTH_TIMEOUT_S) as client:
                r = await client.get(f"{self._base_url}/health")
        except httpx.HTTPError as e:
            logger.debug("Health check failed: %s", e)
            return False
        if not r.is_success:
            logger.warning("Backend unhealthy, status %d", r.status_code)
        return r.is_success
