"""Run independent, unreliable tasks in parallel and keep whatever succeeds."""

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IsolatedTask(Generic[T]):
    """
    A unit of fan-out work.

    Parameters
    ----------
    label : str
        Identifies the task in logs (e.g. 'Aave V3@base')
    fn : Callable[[], T]
        Work to run
    default : Callable[[], T]
        Produces the substitute result on failure or timeout

    """

    label: str
    fn: Callable[[], T]
    default: Callable[[], T] = field(default=list)  # type: ignore[assignment]


def gather_isolated(
    tasks: Sequence[IsolatedTask[T]],
    *,
    max_workers: int = 16,
    timeout: float | None = 30.0,
) -> list[T]:
    """
    Execute tasks concurrently with per-task failure isolation.

    Every task is submitted up front and joined against a single deadline.
    A task that raises, or is still running when the deadline passes,
    contributes its ``default`` instead; it never aborts the others.
    Results are returned in submission order, independent of completion order.

    Parameters
    ----------
    tasks : Sequence[IsolatedTask[T]]
        Tasks to run
    max_workers : int
        Upper bound on worker threads
    timeout : float | None
        Join deadline in seconds (None waits indefinitely)

    Returns
    -------
    list[T]
        One result per task, in input order

    """
    if not tasks:
        return []

    executor = ThreadPoolExecutor(max_workers=max(1, min(len(tasks), max_workers)), thread_name_prefix="defi-fanout")
    try:
        futures = [executor.submit(task.fn) for task in tasks]
        _, not_done = wait(futures, timeout=timeout)

        results: list[T] = []
        for task, future in zip(tasks, futures, strict=True):
            if future in not_done:
                future.cancel()
                logger.warning("%s timed out after %ss, treating as empty", task.label, timeout)
                results.append(task.default())
                continue
            try:
                results.append(future.result())
            except Exception as e:
                logger.warning("%s failed, treating as empty: %s", task.label, e)
                logger.debug("%s traceback", task.label, exc_info=e)
                results.append(task.default())
        return results
    finally:
        # Stalled threads are abandoned rather than joined.
        executor.shutdown(wait=False, cancel_futures=True)
