"""
Scenario data models for evalgrid.

A ScenarioSpec describes one unit of matrix work:
- Which agent/provider pairing it covers
- The external command to run
- Extra environment variables for that command
- A human-readable label used in every console line
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple, Union

from ..exceptions import ConfigurationError


ALL_AGENTS: Tuple[str, ...] = ("claude-code", "gemini", "droid", "codex")

BUILTIN_PROVIDER = "builtin"


class Mode(Enum):
    """Prompt dataset the containers run against."""

    TEST = "test"  # 5 prompts
    FULL = "full"  # 151 prompts


@dataclass(frozen=True)
class RunConfig:
    """One agent × search provider pairing."""

    agent: str
    search_provider: str

    @property
    def name(self) -> str:
        return f"{self.agent}-{self.search_provider}"


@dataclass(frozen=True)
class ScenarioSpec:
    """Immutable description of one scenario.

    Attributes:
        id: Position in the matrix, 1-based
        name: Short name (e.g. "claude-code-you")
        label: Display label, "[id/total] name"
        command: Command tokens to execute
        env_vars: Variables added to the process environment
    """

    id: int
    name: str
    label: str
    command: Tuple[str, ...]
    env_vars: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        # Copy mutable inputs into immutable containers
        object.__setattr__(self, "command", tuple(self.command))
        object.__setattr__(self, "env_vars", MappingProxyType(dict(self.env_vars)))

    @property
    def command_line(self) -> str:
        return " ".join(self.command)


@dataclass(frozen=True)
class Bounded:
    """At most `limit` scenarios in flight."""

    limit: int

    def __post_init__(self):
        if self.limit < 1:
            raise ConfigurationError(f"Bounded concurrency must be >= 1, got {self.limit}")

    @property
    def label(self) -> str:
        return str(self.limit)


@dataclass(frozen=True)
class Unbounded:
    """No cap: every scenario starts immediately."""

    @property
    def label(self) -> str:
        return "unbounded"


Concurrency = Union[Bounded, Unbounded]


def parse_concurrency(value: int) -> Concurrency:
    """Map the external integer setting to a Concurrency variant.

    0 means unbounded; any positive integer is a cap.

    Raises:
        ConfigurationError: If value is negative
    """
    if value < 0:
        raise ConfigurationError(
            f"Invalid concurrency: {value}. Must be a non-negative integer (0 for unlimited)"
        )
    if value == 0:
        return Unbounded()
    return Bounded(value)
