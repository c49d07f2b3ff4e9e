# src/filters/models.py - v1
"""Smell filter configuration models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

ConfirmChoice = Literal["yes", "no", "dont_remind"]


class AnalyzerOption(BaseModel):
    """One tunable threshold passed through to the analyzer."""

    label: str
    description: str = ""
    value: int | float | str


class FilterSmellConfig(BaseModel):
    """Per-smell filter entry."""

    name: str
    message_id: str
    acronym: str
    enabled: bool = True
    analyzer_options: dict[str, AnalyzerOption] = Field(default_factory=dict)

    def option_values(self) -> dict[str, Any]:
        return {k: opt.value for k, opt in self.analyzer_options.items()}


class FilterConfiguration(BaseModel):
    """Persisted filter state: the smell table plus the warning preference."""

    smells: dict[str, FilterSmellConfig] = Field(default_factory=dict)
    suppress_invalidation_warning: bool = False

    def enabled_keys(self) -> list[str]:
        return [key for key, smell in self.smells.items() if smell.enabled]
