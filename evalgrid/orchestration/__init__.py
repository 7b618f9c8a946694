"""
Orchestration layer for evalgrid.

Handles:
- Building the agent × search provider matrix
- Running the matrix (main runner)
- Progress heartbeat
- Dry runs
"""

from .matrix import build_matrix, build_runs, detect_mode, search_providers
from .heartbeat import StatusHeartbeat, create_status_heartbeat
from .runner import MatrixRunner, DryRunner

__all__ = [
    "build_matrix",
    "build_runs",
    "detect_mode",
    "search_providers",
    "StatusHeartbeat",
    "create_status_heartbeat",
    "MatrixRunner",
    "DryRunner",
]
