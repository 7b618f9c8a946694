"""
Report generation for evalgrid.

Generates machine-readable and human-readable reports
from a finished matrix run.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Sequence, Tuple
import json

from ..models.scenario import ScenarioSpec
from ..models.result import ScenarioResult, Summary, format_duration


@dataclass
class Report:
    """Report of one matrix run."""

    timestamp: datetime
    mode: str
    concurrency: str
    total_scenarios: int
    passed: int
    failed: int
    pass_rate: float
    elapsed_seconds: float
    rows: List[Tuple[ScenarioSpec, ScenarioResult]] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "mode": self.mode,
            "concurrency": self.concurrency,
            "total_scenarios": self.total_scenarios,
            "passed": self.passed,
            "failed": self.failed,
            "pass_rate": round(self.pass_rate, 2),
            "elapsed_seconds": round(self.elapsed_seconds, 2),
            "scenarios": [
                {
                    "name": spec.name,
                    "label": spec.label,
                    "command": list(spec.command),
                    **result.to_dict(),
                }
                for spec, result in self.rows
            ],
        }


class Reporter:
    """Builds and exports reports.

    Usage:
        reporter = Reporter()
        report = reporter.generate(matrix, results, summary, mode="test", concurrency="4")
        Path("report.md").write_text(reporter.to_markdown(report))
    """

    def generate(
        self,
        matrix: Sequence[ScenarioSpec],
        results: Sequence[ScenarioResult],
        summary: Summary,
        mode: str,
        concurrency: str,
    ) -> Report:
        total = summary.total
        return Report(
            timestamp=datetime.now(),
            mode=mode,
            concurrency=concurrency,
            total_scenarios=total,
            passed=summary.passed,
            failed=summary.failed,
            pass_rate=(summary.passed / total * 100) if total > 0 else 0.0,
            elapsed_seconds=summary.elapsed_seconds,
            rows=list(zip(matrix, results)),
        )

    def to_json(self, report: Report, indent: int = 2) -> str:
        return json.dumps(report.to_dict(), indent=indent)

    def to_markdown(self, report: Report) -> str:
        md = f"""# Evaluation Matrix Report

**Generated:** {report.timestamp.strftime("%Y-%m-%d %H:%M:%S")}
**Mode:** {report.mode}
**Container concurrency:** {report.concurrency}

## Summary

| Metric | Value |
|--------|-------|
| Total Scenarios | {report.total_scenarios} |
| Passed | {report.passed} |
| Failed | {report.failed} |
| **Pass Rate** | **{report.pass_rate:.1f}%** |
| Elapsed | {format_duration(report.elapsed_seconds)} |

## Results by Scenario

| # | Scenario | Status | Exit | Duration |
|---|----------|--------|------|----------|
"""
        for spec, result in report.rows:
            status = "✅ passed" if result.passed else "❌ failed"
            md += (
                f"| {spec.id} | {spec.name} | {status} | {result.exit_code} | "
                f"{format_duration(result.duration_seconds)} |\n"
            )

        errors = [(spec, result) for spec, result in report.rows if result.error]
        if errors:
            md += "\n## Errors\n\n"
            for spec, result in errors:
                md += f"- **{spec.name}:** {result.error}\n"

        return md
