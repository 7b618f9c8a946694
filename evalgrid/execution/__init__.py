"""
Execution layer for evalgrid.

Handles:
- Running one scenario as an external process
- Bounded-concurrency scheduling of many scenarios
"""

from .process_runner import ProcessRunner
from .limiter import ConcurrencyLimiter, TaskFailure, limit_concurrency

__all__ = [
    "ProcessRunner",
    "ConcurrencyLimiter",
    "TaskFailure",
    "limit_concurrency",
]
