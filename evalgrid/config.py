"""
Configuration management for evalgrid.

Supports:
- Programmatic configuration via dataclasses
- YAML file loading
- Environment variable overrides
- Sensible defaults for all settings
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional, Any, Dict, List
import os

import yaml

from .exceptions import ConfigurationError
from .models.scenario import ALL_AGENTS, Mode, Concurrency, parse_concurrency


@dataclass
class MatrixConfig:
    """What to run: agents, search providers and dataset mode."""

    agents: List[str] = field(default_factory=lambda: list(ALL_AGENTS))
    mcp_servers: List[str] = field(default_factory=lambda: ["you", "exa"])
    search_provider: Optional[str] = None  # None = builtin + every MCP server
    mode: Optional[str] = None  # None = detect from entrypoint
    entrypoint: Path = field(default_factory=lambda: Path("docker") / "entrypoint")
    compose_command: List[str] = field(default_factory=lambda: ["docker", "compose"])

    def __post_init__(self):
        if isinstance(self.entrypoint, str):
            self.entrypoint = Path(self.entrypoint)
        for name in ("agents", "mcp_servers", "compose_command"):
            value = getattr(self, name)
            if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
                raise ConfigurationError(f"{name} must be a list of strings, got {value!r}")

        unknown = [a for a in self.agents if a not in ALL_AGENTS]
        if unknown:
            raise ConfigurationError(
                f"Invalid agent: {unknown[0]}. Must be one of: {', '.join(ALL_AGENTS)}"
            )
        if self.mode is not None and self.mode not in {m.value for m in Mode}:
            raise ConfigurationError(f'Invalid mode: {self.mode}. Must be "test" or "full"')
        if self.search_provider is not None and self.search_provider not in self.valid_providers:
            raise ConfigurationError(
                f"Invalid search provider: {self.search_provider}. "
                f"Must be one of: {', '.join(self.valid_providers)}"
            )
        if not self.compose_command:
            raise ConfigurationError("compose_command cannot be empty")

    @property
    def valid_providers(self) -> List[str]:
        return ["builtin", *self.mcp_servers]


@dataclass
class ExecutionConfig:
    """How to run it: concurrency, heartbeat, timeouts."""

    concurrency: int = 0  # 0 = unbounded
    prompt_concurrency: int = 1  # Passed through to each container
    heartbeat_interval_seconds: float = 30.0
    timeout_seconds: Optional[float] = None  # None = wait forever

    def __post_init__(self):
        _require_number("concurrency", self.concurrency, integer=True)
        _require_number("prompt_concurrency", self.prompt_concurrency, integer=True)
        _require_number("heartbeat_interval_seconds", self.heartbeat_interval_seconds)
        if self.timeout_seconds is not None:
            _require_number("timeout_seconds", self.timeout_seconds)

        if self.concurrency < 0:
            raise ConfigurationError(
                f"Invalid concurrency: {self.concurrency}. "
                "Must be a non-negative integer (0 for unlimited)"
            )
        if self.prompt_concurrency < 1:
            raise ConfigurationError(
                f"Invalid prompt-concurrency: {self.prompt_concurrency}. Must be a positive integer"
            )
        if self.heartbeat_interval_seconds <= 0:
            raise ConfigurationError("heartbeat_interval_seconds must be positive")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ConfigurationError("timeout_seconds must be positive")

    @property
    def concurrency_limit(self) -> Concurrency:
        return parse_concurrency(self.concurrency)


def _require_number(name: str, value: Any, integer: bool = False) -> None:
    # bool is an int subclass, but `true` is not a count
    kinds = (int,) if integer else (int, float)
    if isinstance(value, bool) or not isinstance(value, kinds):
        expected = "an integer" if integer else "a number"
        raise ConfigurationError(f"{name} must be {expected}, got {value!r}")


def _build_section(section_class, data: Dict[str, Any], key: str):
    """Build one config section, rejecting keys the section does not define."""
    values = data.get(key) or {}
    if not isinstance(values, dict):
        raise ConfigurationError(f"Config section '{key}' must be a mapping")
    known = {f.name for f in fields(section_class)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigurationError(f"Unknown config key in '{key}': {', '.join(map(str, unknown))}")
    return section_class(**values)


@dataclass
class Config:
    """Master configuration for evalgrid.

    Example usage:
        # Defaults
        config = Config.default()

        # From file
        config = Config.from_yaml(Path("evalgrid.yaml"))

        # Programmatic
        config = Config(
            matrix=MatrixConfig(agents=["codex"]),
            execution=ExecutionConfig(concurrency=4),
        )
    """

    matrix: MatrixConfig = field(default_factory=MatrixConfig)
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            ConfigurationError: If file not found or invalid
        """
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config root in {path} must be a mapping")
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create Config from dictionary."""
        return cls(
            matrix=_build_section(MatrixConfig, data, "matrix"),
            execution=_build_section(ExecutionConfig, data, "execution"),
        )

    @classmethod
    def default(cls) -> "Config":
        """Create configuration with all defaults."""
        return cls()

    @classmethod
    def from_env(cls, base: Optional["Config"] = None) -> "Config":
        """Apply environment variable overrides.

        Supported environment variables:
        - EVALGRID_CONCURRENCY: Container concurrency (0 = unbounded)
        - EVALGRID_PROMPT_CONCURRENCY: Prompts per container
        - EVALGRID_MODE: Dataset mode (test/full)
        - EVALGRID_HEARTBEAT_INTERVAL: Seconds between progress lines
        - EVALGRID_TIMEOUT: Per-scenario timeout in seconds
        """
        config = base or cls.default()
        data = config.to_dict()

        try:
            if concurrency := os.environ.get("EVALGRID_CONCURRENCY"):
                data["execution"]["concurrency"] = int(concurrency)
            if prompt_concurrency := os.environ.get("EVALGRID_PROMPT_CONCURRENCY"):
                data["execution"]["prompt_concurrency"] = int(prompt_concurrency)
            if interval := os.environ.get("EVALGRID_HEARTBEAT_INTERVAL"):
                data["execution"]["heartbeat_interval_seconds"] = float(interval)
            if timeout := os.environ.get("EVALGRID_TIMEOUT"):
                data["execution"]["timeout_seconds"] = float(timeout)
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric environment override: {e}")

        if mode := os.environ.get("EVALGRID_MODE"):
            data["matrix"]["mode"] = mode

        # Re-run validation on the merged values
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary (for serialization)."""
        return {
            "matrix": {
                "agents": list(self.matrix.agents),
                "mcp_servers": list(self.matrix.mcp_servers),
                "search_provider": self.matrix.search_provider,
                "mode": self.matrix.mode,
                "entrypoint": str(self.matrix.entrypoint),
                "compose_command": list(self.matrix.compose_command),
            },
            "execution": {
                "concurrency": self.execution.concurrency,
                "prompt_concurrency": self.execution.prompt_concurrency,
                "heartbeat_interval_seconds": self.execution.heartbeat_interval_seconds,
                "timeout_seconds": self.execution.timeout_seconds,
            },
        }

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False)
