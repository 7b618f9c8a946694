"""
Main runner for evalgrid.

The MatrixRunner drives one batch:
1. Start the progress heartbeat
2. Hand one deferred ProcessRunner call per scenario to the limiter
3. Stop the heartbeat once every scenario has settled
4. Summarize results and compute the exit code
"""

import time
from typing import Callable, Awaitable, List, Optional, Set, Tuple
import logging

from ..config import Config
from ..models.scenario import ScenarioSpec
from ..models.result import LAUNCH_FAILURE_EXIT_CODE, ScenarioResult, Summary
from ..execution.limiter import ConcurrencyLimiter
from ..execution.process_runner import ProcessRunner
from ..reporting.aggregator import ResultAggregator
from .heartbeat import create_status_heartbeat

logger = logging.getLogger(__name__)


class MatrixRunner:
    """Runs a whole matrix under the configured concurrency.

    Usage:
        runner = MatrixRunner(config)
        results, summary = await runner.execute(matrix)
        sys.exit(summary.exit_code)

    Attributes:
        config: Configuration for the runner
        process_runner: Runs one scenario (ProcessRunner by default)
        aggregator: Summarizes results
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        process_runner: Optional[ProcessRunner] = None,
        aggregator: Optional[ResultAggregator] = None,
    ):
        self.config = config or Config.default()
        self.process_runner = process_runner or ProcessRunner(
            timeout_seconds=self.config.execution.timeout_seconds
        )
        self.aggregator = aggregator or ResultAggregator()

    async def run(self, matrix: List[ScenarioSpec]) -> Tuple[List[ScenarioResult], float]:
        """Run every scenario in the matrix.

        Args:
            matrix: Scenarios in report order

        Returns:
            (results in matrix order, monotonic start time)
        """
        concurrency = self.config.execution.concurrency_limit
        completed: Set[int] = set()
        start_time = time.monotonic()

        logger.info(f"Running {len(matrix)} scenarios (concurrency={concurrency.label})")
        limiter = ConcurrencyLimiter(failure_factory=self._failure_factory(matrix))
        heartbeat = create_status_heartbeat(
            matrix,
            completed,
            concurrency,
            interval_seconds=self.config.execution.heartbeat_interval_seconds,
            start_time=start_time,
        )
        try:
            results = await limiter.run(
                [self._deferred(spec, completed) for spec in matrix],
                concurrency,
            )
        finally:
            heartbeat.stop()

        return results, start_time

    async def execute(self, matrix: List[ScenarioSpec]) -> Tuple[List[ScenarioResult], Summary]:
        """Run the matrix and print the results summary."""
        results, start_time = await self.run(matrix)
        summary = self.aggregator.summarize(matrix, results, start_time)
        return results, summary

    def _deferred(
        self,
        spec: ScenarioSpec,
        completed: Set[int],
    ) -> Callable[[], Awaitable[ScenarioResult]]:
        async def task() -> ScenarioResult:
            try:
                return await self.process_runner.run(spec)
            finally:
                completed.add(spec.id)

        return task

    @staticmethod
    def _failure_factory(matrix: List[ScenarioSpec]) -> Callable[[int, Exception], ScenarioResult]:
        def failure(index: int, error: Exception) -> ScenarioResult:
            return ScenarioResult(
                id=matrix[index].id,
                exit_code=LAUNCH_FAILURE_EXIT_CODE,
                duration_ms=0,
                error=f"Internal error: {error}",
            )

        return failure


class DryRunner:
    """Dry run mode - prints the execution plan without launching anything."""

    def plan(self, matrix: List[ScenarioSpec]) -> List[str]:
        """One line per scenario: label and the command it would run."""
        return [f"  {spec.label}: {spec.command_line}" for spec in matrix]

    def print_plan(self, matrix: List[ScenarioSpec]) -> None:
        print("[DRY RUN] Execution plan:")
        for line in self.plan(matrix):
            print(line)
        print("\n[DRY RUN] No services were executed.")
