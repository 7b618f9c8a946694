"""
Result data models for evalgrid.

A ScenarioResult records the only signal the core observes from a
scenario: its exit code, plus how long it took.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .scenario import ScenarioSpec

# Exit code recorded when the process never started
LAUNCH_FAILURE_EXIT_CODE = 1
# Exit code recorded when an opt-in timeout killed the process (same as coreutils timeout)
TIMEOUT_EXIT_CODE = 124


def format_duration(seconds: float) -> str:
    """Format a duration as "850ms", "12.3s", "4m 05s" or "1h 02m"."""
    if seconds < 1:
        return f"{int(seconds * 1000)}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    if minutes < 60:
        return f"{minutes}m {secs:02d}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes:02d}m"


@dataclass(frozen=True)
class ScenarioResult:
    """Outcome of one scenario.

    Produced exactly once per ScenarioSpec, on process exit or
    as a synthetic failure.
    """

    id: int
    exit_code: int
    duration_ms: int
    error: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.exit_code == 0

    @property
    def duration_seconds(self) -> float:
        return self.duration_ms / 1000

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "exit_code": self.exit_code,
            "duration_ms": self.duration_ms,
            "passed": self.passed,
            "error": self.error,
        }


@dataclass
class Summary:
    """Aggregate outcome of a matrix run."""

    total: int
    passed: int
    elapsed_seconds: float
    failures: List[ScenarioSpec] = field(default_factory=list)
    exit_code: int = 0

    @property
    def failed(self) -> int:
        return len(self.failures)
