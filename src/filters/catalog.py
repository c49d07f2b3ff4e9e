# src/filters/catalog.py - v1
"""Built-in smell catalogue used for first run and reset."""

from __future__ import annotations

from smelltrack.filters.models import AnalyzerOption, FilterConfiguration, FilterSmellConfig

_DEFAULT_SMELLS: dict[str, FilterSmellConfig] = {
    "too-many-arguments": FilterSmellConfig(
        name="Too Many Arguments",
        message_id="R0913",
        acronym="LPL",
        analyzer_options={
            "max_args": AnalyzerOption(
                label="Max Arguments",
                description="Maximum parameters a function may declare.",
                value=6,
            ),
        },
    ),
    "use-a-generator": FilterSmellConfig(
        name="Use A Generator",
        message_id="R1729",
        acronym="UGEN",
    ),
    "no-self-use": FilterSmellConfig(
        name="No Self Use",
        message_id="R6301",
        acronym="NSU",
    ),
    "long-lambda-expression": FilterSmellConfig(
        name="Long Lambda Expression",
        message_id="LLE001",
        acronym="LLE",
        analyzer_options={
            "threshold_length": AnalyzerOption(
                label="Lambda Length",
                description="Maximum characters in a lambda body.",
                value=9,
            ),
            "threshold_count": AnalyzerOption(
                label="Repetition Count",
                description="Maximum expressions in a lambda body.",
                value=5,
            ),
        },
    ),
    "long-message-chain": FilterSmellConfig(
        name="Long Message Chain",
        message_id="LMC001",
        acronym="LMC",
        analyzer_options={
            "threshold": AnalyzerOption(
                label="Threshold",
                description="Maximum chained method calls.",
                value=3,
            ),
        },
    ),
    "long-element-chain": FilterSmellConfig(
        name="Long Element Chain",
        message_id="LEC001",
        acronym="LEC",
        analyzer_options={
            "threshold": AnalyzerOption(
                label="Threshold",
                description="Maximum chained subscript accesses.",
                value=3,
            ),
        },
    ),
    "cached-repeated-calls": FilterSmellConfig(
        name="Cached Repeated Calls",
        message_id="CRC001",
        acronym="CRC",
        analyzer_options={
            "threshold": AnalyzerOption(
                label="Repetitions",
                description="Identical calls before caching is suggested.",
                value=2,
            ),
        },
    ),
    "string-concat-loop": FilterSmellConfig(
        name="String Concatenation in Loop",
        message_id="SCL001",
        acronym="SCL",
    ),
}


def default_configuration() -> FilterConfiguration:
    """Fresh copy of the built-in catalogue, all smells enabled."""
    return FilterConfiguration(
        smells={key: smell.model_copy(deep=True) for key, smell in _DEFAULT_SMELLS.items()}
    )


def acronym_for(message_id: str, configuration: FilterConfiguration | None = None) -> str | None:
    """Look up a smell's acronym by analyzer message id (e.g. R0913 -> LPL)."""
    smells = (configuration or default_configuration()).smells
    for smell in smells.values():
        if smell.message_id == message_id:
            return smell.acronym
    return None
