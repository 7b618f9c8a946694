"""
Data models for evalgrid.

Public exports:
- Scenario models (ScenarioSpec, RunConfig, Mode)
- Concurrency variants (Bounded, Unbounded)
- Result models (ScenarioResult, Summary)
"""

from .scenario import (
    ALL_AGENTS,
    BUILTIN_PROVIDER,
    Mode,
    RunConfig,
    ScenarioSpec,
    Bounded,
    Unbounded,
    Concurrency,
    parse_concurrency,
)

from .result import (
    LAUNCH_FAILURE_EXIT_CODE,
    TIMEOUT_EXIT_CODE,
    ScenarioResult,
    Summary,
    format_duration,
)

__all__ = [
    # Scenario models
    "ALL_AGENTS",
    "BUILTIN_PROVIDER",
    "Mode",
    "RunConfig",
    "ScenarioSpec",
    # Concurrency
    "Bounded",
    "Unbounded",
    "Concurrency",
    "parse_concurrency",
    # Result models
    "LAUNCH_FAILURE_EXIT_CODE",
    "TIMEOUT_EXIT_CODE",
    "ScenarioResult",
    "Summary",
    "format_duration",
]
