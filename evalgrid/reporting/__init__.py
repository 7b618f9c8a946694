"""
Reporting layer for evalgrid.

Handles:
- Console results summary and exit code policy
- Report export (JSON, Markdown)
"""

from .aggregator import ResultAggregator, print_results_summary
from .reporter import Report, Reporter

__all__ = [
    "ResultAggregator",
    "print_results_summary",
    "Report",
    "Reporter",
]
