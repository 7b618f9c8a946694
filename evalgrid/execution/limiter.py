"""
Bounded-parallelism executor for evalgrid.

Runs deferred async tasks with at most N in flight, keeps results in
input order, and never lets one task's failure stop the batch.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar
import logging

from ..models.scenario import Concurrency, Unbounded

logger = logging.getLogger(__name__)

R = TypeVar("R")

Task = Callable[[], Awaitable[R]]
FailureFactory = Callable[[int, Exception], Any]


@dataclass(frozen=True)
class TaskFailure:
    """Placeholder recorded at the index of a task that raised."""

    index: int
    error: Exception

    def __str__(self) -> str:
        return f"TaskFailure(index={self.index}, error={self.error!r})"


class ConcurrencyLimiter:
    """Runs task factories under a concurrency cap.

    Guarantees:
    - result[i] corresponds to tasks[i], whatever the completion order
    - Under Bounded(k), at most k tasks are in flight, and free slots
      always go to the lowest-indexed task not yet started
    - Under Unbounded, every task starts immediately
    - A task that raises is replaced by failure_factory(index, error);
      siblings keep running and the batch never aborts

    Usage:
        limiter = ConcurrencyLimiter()
        results = await limiter.run(
            [lambda: fetch(1), lambda: fetch(2)],
            Bounded(1),
        )
    """

    def __init__(self, failure_factory: Optional[FailureFactory] = None):
        """Initialize limiter.

        Args:
            failure_factory: Builds the entry stored for a failed task
                (defaults to TaskFailure)
        """
        self.failure_factory = failure_factory or TaskFailure

    async def run(self, tasks: Sequence[Task], concurrency: Concurrency) -> List[Any]:
        """Run all tasks and return their results in input order.

        Args:
            tasks: Zero-argument callables returning awaitables
            concurrency: Bounded(k) or Unbounded()

        Returns:
            One entry per task, at the task's index
        """
        tasks = list(tasks)
        if not tasks:
            return []

        results: List[Any] = [None] * len(tasks)

        async def settle(index: int) -> None:
            try:
                results[index] = await tasks[index]()
            except Exception as e:
                logger.exception(f"Task {index + 1}/{len(tasks)} raised: {e}")
                results[index] = self.failure_factory(index, e)

        if isinstance(concurrency, Unbounded) or concurrency.limit >= len(tasks):
            await asyncio.gather(*(settle(i) for i in range(len(tasks))))
            return results

        # Workers share one iterator, so each free slot takes the next index in order
        pending = iter(range(len(tasks)))

        async def worker() -> None:
            for index in pending:
                await settle(index)

        await asyncio.gather(*(worker() for _ in range(concurrency.limit)))
        return results


async def limit_concurrency(
    tasks: Sequence[Task],
    concurrency: Concurrency,
    failure_factory: Optional[FailureFactory] = None,
) -> List[Any]:
    """Shortcut for ConcurrencyLimiter(failure_factory).run(tasks, concurrency)."""
    return await ConcurrencyLimiter(failure_factory).run(tasks, concurrency)
