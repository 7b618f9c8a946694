"""
evalgrid - Parallel evaluation matrix runner.

Runs every agent × search provider combination as an isolated
`docker compose run` process, under a concurrency cap, and reports a
consolidated pass/fail summary.

Quick start:
    import asyncio
    from evalgrid import Config, MatrixRunner, build_matrix, Mode

    config = Config.default()
    matrix = build_matrix(config.matrix, Mode.TEST)
    results, summary = asyncio.run(MatrixRunner(config).execute(matrix))
    raise SystemExit(summary.exit_code)

CLI usage:
    evalgrid run --mode test -j 4
"""

__version__ = "0.1.0"

# Core exports
from .config import Config, MatrixConfig, ExecutionConfig
from .exceptions import (
    EvalGridError,
    ConfigurationError,
    MatrixError,
    LaunchError,
)

# Model exports
from .models import (
    ALL_AGENTS,
    Mode,
    RunConfig,
    ScenarioSpec,
    Bounded,
    Unbounded,
    parse_concurrency,
    LAUNCH_FAILURE_EXIT_CODE,
    TIMEOUT_EXIT_CODE,
    ScenarioResult,
    Summary,
)

# Execution exports
from .execution import ProcessRunner, ConcurrencyLimiter, TaskFailure, limit_concurrency

# Orchestration exports
from .orchestration import (
    build_matrix,
    detect_mode,
    StatusHeartbeat,
    create_status_heartbeat,
    MatrixRunner,
    DryRunner,
)

# Reporting exports
from .reporting import ResultAggregator, print_results_summary, Report, Reporter

__all__ = [
    # Version
    "__version__",
    # Config
    "Config",
    "MatrixConfig",
    "ExecutionConfig",
    # Exceptions
    "EvalGridError",
    "ConfigurationError",
    "MatrixError",
    "LaunchError",
    # Models
    "ALL_AGENTS",
    "Mode",
    "RunConfig",
    "ScenarioSpec",
    "Bounded",
    "Unbounded",
    "parse_concurrency",
    "LAUNCH_FAILURE_EXIT_CODE",
    "TIMEOUT_EXIT_CODE",
    "ScenarioResult",
    "Summary",
    # Execution
    "ProcessRunner",
    "ConcurrencyLimiter",
    "TaskFailure",
    "limit_concurrency",
    # Orchestration
    "build_matrix",
    "detect_mode",
    "StatusHeartbeat",
    "create_status_heartbeat",
    "MatrixRunner",
    "DryRunner",
    # Reporting
    "ResultAggregator",
    "print_results_summary",
    "Report",
    "Reporter",
]
