# src/config/settings.py - v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings: where the workspace
is, how to reach the analysis backend, where cached results live and how the
workspace is watched.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Workspace ===
    workspace_root: Path | None = None

    # === Analysis backend ===
    analyzer_url: str = "http://127.0.0.1:8000"
    analyzer_timeout_s: float = 120.0
    health_poll_interval_s: float = 10.0

    # === Cache ===
    cache_backend: Literal["json", "sqlite", "redis", "memory"] = "json"
    cache_root: Path = Path("~/.smelltrack/cache")
    cache_redis_url: str = ""

    # === Smell filters ===
    filter_config_path: Path = Path("~/.smelltrack/smells.json")

    # === Workspace watching ===
    watch_patterns: str = "*.py"
    watch_ignore_dirs: str = ".git,__pycache__,.venv,venv,node_modules,.mypy_cache,.tox"
    watch_interval_s: float = 1.0
    auto_lint_on_save: bool = False
    carry_cache_on_rename: bool = True

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("analyzer_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:  # noqa: N805
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.cache_backend == "redis" and not self.cache_redis_url:
            errors.append("CACHE_BACKEND=redis requires CACHE_REDIS_URL")

        for name in ("analyzer_timeout_s", "health_poll_interval_s", "watch_interval_s"):
            if getattr(self, name) <= 0:
                errors.append(f"{name.upper()} must be > 0")

        if not self.watch_patterns_list:
            errors.append("WATCH_PATTERNS must list at least one pattern")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def watch_patterns_list(self) -> list[str]:
        """Parse comma-separated glob patterns."""
        return [p.strip() for p in self.watch_patterns.split(",") if p.strip()]

    @property
    def watch_ignore_dirs_set(self) -> frozenset[str]:
        """Parse comma-separated directory names skipped while watching."""
        return frozenset(d.strip() for d in self.watch_ignore_dirs.split(",") if d.strip())

    @property
    def resolved_workspace_root(self) -> Path | None:
        if self.workspace_root is None:
            return None
        return self.workspace_root.expanduser().resolve()


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
