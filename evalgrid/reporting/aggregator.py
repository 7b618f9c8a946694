"""
Result aggregation for evalgrid.

Prints the per-scenario pass/fail summary and derives the process exit
code from the worst outcome.
"""

import time
from typing import Optional, Sequence

from ..exceptions import MatrixError
from ..models.scenario import ScenarioSpec
from ..models.result import ScenarioResult, Summary, format_duration
from ..execution.process_runner import SUCCESS_GLYPH, FAILURE_GLYPH


class ResultAggregator:
    """Summarizes a finished matrix run.

    Exit code policy: 0 exactly when every scenario exited 0
    (an empty matrix counts as all passed), otherwise 1.
    """

    FAILURE_EXIT_CODE = 1

    def summarize(
        self,
        matrix: Sequence[ScenarioSpec],
        results: Sequence[ScenarioResult],
        start_time: Optional[float] = None,
    ) -> Summary:
        """Print the results block and compute the overall outcome.

        Args:
            matrix: Scenarios in run order
            results: One result per scenario, same order
            start_time: time.monotonic() at batch start (None = no elapsed time)

        Returns:
            Summary with the failed specs and the process exit code

        Raises:
            MatrixError: If results do not line up with the matrix
        """
        if len(results) != len(matrix):
            raise MatrixError(f"Got {len(results)} results for {len(matrix)} scenarios")

        elapsed = time.monotonic() - start_time if start_time is not None else 0.0

        print()
        print("=" * 60)
        print("Results")
        print("=" * 60)

        failures = []
        for spec, result in zip(matrix, results):
            if result.id != spec.id:
                raise MatrixError(f"Result {result.id} reported at position of scenario {spec.id}")
            duration = format_duration(result.duration_seconds)
            if result.passed:
                print(f"  {SUCCESS_GLYPH} {spec.label} ({duration})")
            else:
                failures.append(spec)
                detail = f" - {result.error}" if result.error else ""
                print(f"  {FAILURE_GLYPH} {spec.label}: exit={result.exit_code} ({duration}){detail}")

        total = len(matrix)
        passed = total - len(failures)
        print()
        print(
            f"Total: {total} scenarios, {passed} succeeded, {len(failures)} failed "
            f"in {format_duration(elapsed)}"
        )
        if failures:
            print("Failed scenarios:")
            for spec in failures:
                print(f"  - {spec.name}")

        return Summary(
            total=total,
            passed=passed,
            elapsed_seconds=elapsed,
            failures=failures,
            exit_code=self.FAILURE_EXIT_CODE if failures else 0,
        )


def print_results_summary(
    matrix: Sequence[ScenarioSpec],
    results: Sequence[ScenarioResult],
    start_time: Optional[float] = None,
) -> Summary:
    """Shortcut for ResultAggregator().summarize(...)."""
    return ResultAggregator().summarize(matrix, results, start_time)
