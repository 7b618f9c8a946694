"""
Periodic progress reporting for evalgrid.

While a batch drains, prints how many scenarios are done, how long the
batch has been running, and the concurrency setting.
"""

import asyncio
import time
from typing import AbstractSet, Optional, Sequence
import logging

from ..models.scenario import Concurrency, ScenarioSpec
from ..models.result import format_duration

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 30.0


class StatusHeartbeat:
    """Background progress line printer.

    Reads the completion set by reference on every tick, so each line
    shows current progress. Purely observational: it never touches
    scheduling or results.

    Usage:
        heartbeat = StatusHeartbeat(matrix, completed, Bounded(4)).start()
        try:
            results = await limiter.run(tasks, Bounded(4))
        finally:
            heartbeat.stop()
    """

    def __init__(
        self,
        matrix: Sequence[ScenarioSpec],
        completed: AbstractSet[int],
        concurrency: Concurrency,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        start_time: Optional[float] = None,
    ):
        """Initialize heartbeat.

        Args:
            matrix: Scenarios in the batch (only the count is used)
            completed: Live set of completed scenario ids
            concurrency: Setting shown in each line
            interval_seconds: Seconds between lines
            start_time: time.monotonic() at batch start (defaults to now)
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.matrix = matrix
        self.completed = completed
        self.concurrency = concurrency
        self.interval_seconds = interval_seconds
        self.start_time = time.monotonic() if start_time is None else start_time
        self._task: Optional[asyncio.Task] = None
        self._stopped = False

    def status_line(self) -> str:
        elapsed = format_duration(time.monotonic() - self.start_time)
        return (
            f"{len(self.completed)}/{len(self.matrix)} scenarios done ({elapsed}) "
            f"[concurrency={self.concurrency.label}]"
        )

    def tick(self) -> None:
        """Print one status line, unless stopped."""
        if not self._stopped:
            print(self.status_line(), flush=True)

    def start(self) -> "StatusHeartbeat":
        """Begin ticking on the running event loop."""
        if self._task is None and not self._stopped:
            self._task = asyncio.get_running_loop().create_task(self._loop())
            logger.debug(f"Heartbeat started (every {self.interval_seconds}s)")
        return self

    def stop(self) -> None:
        """Stop ticking. Safe to call more than once or before any tick."""
        self._stopped = True
        if self._task is not None:
            self._task.cancel()
            self._task = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._stopped

    async def _loop(self) -> None:
        while not self._stopped:
            await asyncio.sleep(self.interval_seconds)
            self.tick()


def create_status_heartbeat(
    matrix: Sequence[ScenarioSpec],
    completed: AbstractSet[int],
    concurrency: Concurrency,
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    start_time: Optional[float] = None,
) -> StatusHeartbeat:
    """Create and start a heartbeat. Must be called inside a running loop."""
    return StatusHeartbeat(matrix, completed, concurrency, interval_seconds, start_time).start()
